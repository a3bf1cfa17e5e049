"""Connector utilities for the solo pool statistics endpoint."""

from .pool_client import PoolClientError, SoloPoolClient

__all__ = [
    "PoolClientError",
    "SoloPoolClient",
]
