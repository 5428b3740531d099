"""Resolution outcomes.

Every call to ``StaticAssetResolver.resolve`` produces exactly one of
``Found``, ``Forbidden`` or ``NotFound``. Outcomes are frozen so adapters
can pass them around without copying.
"""

from dataclasses import dataclass
from pathlib import Path

from staticgate.core.types import URLPath


@dataclass(frozen=True)
class Found:
    """An existing, permitted asset."""

    path: URLPath
    body: bytes
    content_type: str
    source_path: Path
    mtime: float

    @property
    def size(self) -> int:
        return len(self.body)


@dataclass(frozen=True)
class Forbidden:
    """Request denied by policy.

    The reason describes which rule rejected the path. It never mentions
    whether a file exists on disk.
    """

    path: str
    reason: str


@dataclass(frozen=True)
class NotFound:
    """Request permitted by policy, but no asset matches."""

    path: URLPath
    reason: str


ResolutionOutcome = Found | Forbidden | NotFound
