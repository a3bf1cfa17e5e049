import sys
import types
from pathlib import Path
from typing import List

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from alerts import local_sound


def _fake_simpleaudio(played: List[str], fail: bool = False) -> types.ModuleType:
    class _Playback:
        def wait_done(self) -> None:
            return None

    class _WaveObject:
        def __init__(self, path: str) -> None:
            self.path = path

        @classmethod
        def from_wave_file(cls, path: str) -> "_WaveObject":
            if fail:
                raise ValueError("not a wave file")
            return cls(path)

        def play(self) -> _Playback:
            played.append(self.path)
            return _Playback()

    module = types.ModuleType("simpleaudio")
    module.WaveObject = _WaveObject  # type: ignore[attr-defined]
    return module


@pytest.fixture()
def sound_file(tmp_path: Path) -> Path:
    path = tmp_path / "ding.wav"
    path.write_bytes(b"RIFF")
    return path


def test_play_prefers_simpleaudio(sound_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    played: List[str] = []
    commands: List[List[str]] = []
    monkeypatch.setitem(sys.modules, "simpleaudio", _fake_simpleaudio(played))
    monkeypatch.setattr(local_sound.subprocess, "run", lambda command, **kwargs: commands.append(command))

    local_sound.play(str(sound_file))

    assert played == [str(sound_file)]
    assert commands == []


def test_play_falls_back_to_system_player(sound_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    commands: List[List[str]] = []
    monkeypatch.setitem(sys.modules, "simpleaudio", _fake_simpleaudio([], fail=True))
    monkeypatch.setattr(local_sound.platform, "system", lambda: "Linux")
    monkeypatch.setattr(local_sound, "_player_command", lambda path, volume: ["player", str(path)])
    monkeypatch.setattr(local_sound.subprocess, "run", lambda command, **kwargs: commands.append(command))

    local_sound.play(str(sound_file), volume=0.5)

    assert commands == [["player", str(sound_file)]]


def test_missing_file_rings_bell(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    local_sound.play(str(tmp_path / "absent.wav"))
    assert capsys.readouterr().out == "\a"
