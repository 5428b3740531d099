"""Exceptions raised by staticgate.

Forbidden and not-found are resolution outcomes, not exceptions. These
cover faults that happen after an asset has been classified as servable.
"""

from pathlib import Path


class StaticGateError(Exception):
    """Base class for staticgate errors."""


class AssetReadError(StaticGateError):
    """An allowed asset could not be looked up or read."""

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"Failed to read asset {path}: {cause}")
        self.path = path
        self.cause = cause
