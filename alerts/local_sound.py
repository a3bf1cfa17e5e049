"""Audible cue for new best shares, with a notifier wrapper."""

from __future__ import annotations

import asyncio
import logging
import platform
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from alerts.notifiers.base import Category, Notifier, NotifierTestResult, NotificationMessage

LOGGER = logging.getLogger(__name__)


def _beep() -> None:
    print("\a", end="", flush=True)


def _player_command(path: Path, volume: float) -> Optional[list[str]]:
    system = platform.system().lower()
    if system == "darwin":
        return ["afplay", "-v", f"{volume:.2f}", str(path)]
    if system == "linux":
        if shutil.which("paplay"):
            return ["paplay", f"--volume={int(volume * 65536)}", str(path)]
        if shutil.which("aplay"):
            return ["aplay", "-q", str(path)]
    return None


def _play_wave(path: Path) -> bool:
    """Play ``path`` with simpleaudio; ``False`` when it is missing or fails."""

    try:
        import simpleaudio  # type: ignore

        simpleaudio.WaveObject.from_wave_file(str(path)).play().wait_done()
        return True
    except Exception as exc:
        LOGGER.debug("simpleaudio unavailable (%s), falling back to system player", exc)
        return False


def play(sound_file: Optional[str], volume: float = 1.0) -> None:
    """Play ``sound_file`` with simpleaudio, then the platform player, else the bell.

    Raises when neither the player nor the bell works; callers decide whether
    that matters.
    """

    if not sound_file:
        _beep()
        return
    path = Path(sound_file)
    if not path.exists():
        LOGGER.warning("Sound file %s does not exist", sound_file)
        _beep()
        return

    if _play_wave(path):
        return

    if platform.system().lower() == "windows":
        import winsound

        winsound.PlaySound(str(path), winsound.SND_FILENAME)
        return

    command = _player_command(path, volume)
    if command is None:
        LOGGER.debug("No audio player found, using terminal bell")
        _beep()
        return
    subprocess.run(command, check=True, timeout=10)


@dataclass(slots=True)
class LocalSoundNotifier(Notifier):
    """Local sound channel implementing the notifier interface."""

    enabled_flag: bool
    sound_file: Optional[str] = None
    volume: float = 1.0
    name: str = "local_sound"

    def enabled(self) -> bool:
        return self.enabled_flag

    async def send(self, message: NotificationMessage) -> bool:
        if not self.enabled():
            return False
        try:
            await asyncio.to_thread(play, self.sound_file, self.volume)
        except Exception as exc:
            LOGGER.info("Could not play sound for %s: %s", message.title, exc)
            return False
        LOGGER.debug("Local sound triggered for message: %s", message.title)
        return True

    async def self_test(self) -> NotifierTestResult:
        ok = await self.send(NotificationMessage(title="Sound test", body="", category=Category.SYSTEM))
        return NotifierTestResult(ok=ok, detail="Local sound played" if ok else "Sound unavailable")


__all__ = ["play", "LocalSoundNotifier"]
