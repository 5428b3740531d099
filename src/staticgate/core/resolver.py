"""Static asset resolution.

Maps request paths to files under the configured mounts in two phases:

1. Policy check on the path string alone (see ``staticgate.core.policy``).
2. Existence check and read, only for paths the policy allows.

Nothing is cached; every call reads the filesystem afresh.
"""

from __future__ import annotations

import errno
import logging
from pathlib import Path

from staticgate.core.content_types import guess_content_type
from staticgate.core.outcome import Forbidden, Found, NotFound, ResolutionOutcome
from staticgate.core.policy import AccessPolicy, AssetRoot, Denied
from staticgate.core.types import URLPath
from staticgate.errors import AssetReadError

logger = logging.getLogger(__name__)

# Lookup failures meaning "no such asset" rather than an I/O fault
_MISSING_ERRNOS = frozenset(
    {errno.ENOENT, errno.ENOTDIR, errno.ENAMETOOLONG, errno.ELOOP, errno.EINVAL},
)


class StaticAssetResolver:
    """Resolves request paths to static assets."""

    def __init__(self, policy: AccessPolicy, *, index: str | None = None) -> None:
        """Initialize resolver.

        Args:
            policy: Access policy holding the mounts and deny patterns
            index: File served for directory requests (e.g. "index.html").
                None disables directory index resolution.
        """
        self._policy = policy
        self._index = index or None

    @classmethod
    def for_directory(cls, directory: Path, prefix: str = "/") -> StaticAssetResolver:
        """Create a resolver serving a single directory under prefix."""
        return cls(AccessPolicy(AssetRoot.single(directory, prefix)))

    @property
    def policy(self) -> AccessPolicy:
        return self._policy

    def resolve(self, path: str, prefix: str | None = None) -> ResolutionOutcome:
        """Resolve a request path.

        Args:
            path: URL-decoded request path, possibly nested
            prefix: Optional subdirectory prefix prepended to path

        Returns:
            Found, Forbidden or NotFound

        Raises:
            AssetReadError: If the lookup or read of an allowed path fails
                with an I/O error other than "no such file"
        """
        raw_path = f"{prefix.rstrip('/')}/{path.lstrip('/')}" if prefix else path

        decision = self._policy.check(raw_path)
        if isinstance(decision, Denied):
            logger.debug(f"Forbidden {raw_path!r}: {decision.reason}")
            return Forbidden(path=decision.path, reason=decision.reason)

        url_path = decision.path
        directory = decision.mount.directory
        candidate = directory / decision.relative
        try:
            outcome = self._locate(url_path, directory, candidate)
        except OSError as e:
            if e.errno in _MISSING_ERRNOS:
                return self._not_found(url_path, "no matching asset")
            raise AssetReadError(candidate, e) from e

        if isinstance(outcome, Path):
            return self._read(url_path, outcome)
        return outcome

    def _locate(
        self,
        url_path: URLPath,
        directory: Path,
        candidate: Path,
    ) -> Path | Forbidden | NotFound:
        """Find the file to serve for an allowed path.

        Raises:
            OSError: If the filesystem rejects the lookup
        """
        candidate = candidate.resolve()

        # Symlinks may point outside the mount; treat as outside AssetRoot
        if not candidate.is_relative_to(directory):
            logger.debug(f"Forbidden {url_path!r}: resolves outside mount")
            return Forbidden(path=url_path, reason="path resolves outside its mount")

        if candidate.is_dir():
            if self._index is None:
                return self._not_found(url_path, "path is a directory")
            candidate = candidate / self._index
            if not candidate.is_file():
                return self._not_found(url_path, "directory has no index file")
        elif url_path.endswith("/") or not candidate.is_file():
            return self._not_found(url_path, "no matching asset")

        return candidate

    def _read(self, url_path: URLPath, file_path: Path) -> Found:
        try:
            body = file_path.read_bytes()
            mtime = file_path.stat().st_mtime
        except OSError as e:
            raise AssetReadError(file_path, e) from e

        content_type = guess_content_type(file_path.name)
        logger.debug(f"Found {url_path!r} -> {file_path} ({content_type}, {len(body)} bytes)")
        return Found(
            path=url_path,
            body=body,
            content_type=content_type,
            source_path=file_path,
            mtime=mtime,
        )

    @staticmethod
    def _not_found(url_path: URLPath, reason: str) -> NotFound:
        logger.debug(f"Not found {url_path!r}: {reason}")
        return NotFound(path=url_path, reason=reason)
