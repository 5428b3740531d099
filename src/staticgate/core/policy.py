"""Access policy for static asset requests.

The policy decides whether a request path may be served at all, using only
the path string and the configured rules. It never touches the filesystem,
so a denial cannot depend on (or reveal) whether a file exists.

Rules:
    - The path is normalized first. ``..`` segments that climb above the
      URL root, backslashes and NUL bytes are rejected.
    - The normalized path must fall under one of the mounts. Mount prefixes
      match on whole segments, so ``/binary`` covers ``/binary/x`` but not
      ``/binaryx``. The longest matching prefix wins.
    - The path relative to the mount must not match a deny pattern. Patterns
      are ``fnmatch`` globs tested against the whole relative path and
      against each segment, so ``.*`` denies every dotfile and dot-directory.
"""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path

from staticgate.core.types import URLPath

DEFAULT_DENY_PATTERNS: tuple[str, ...] = (".*",)


class PathRejected(ValueError):
    """Raised by ``normalize_path`` for paths that cannot be normalized safely."""


@dataclass(frozen=True)
class Mount:
    """URL prefix served from a base directory."""

    prefix: URLPath
    directory: Path

    @classmethod
    def create(cls, prefix: str, directory: Path) -> Mount:
        """Create a mount with a normalized prefix and an absolute directory.

        Args:
            prefix: URL prefix, e.g. "/binary" or "/"
            directory: Base directory for files under the prefix

        Returns:
            Mount instance
        """
        return cls(
            prefix=normalize_prefix(prefix),
            directory=directory.resolve(),
        )

    def relative(self, path: URLPath) -> str | None:
        """Return the path relative to this mount, or None if it is outside."""
        if self.prefix == "/":
            return path.lstrip("/")
        if path == self.prefix:
            return ""
        if path.startswith(self.prefix + "/"):
            return path[len(self.prefix) + 1 :]
        return None


@dataclass(frozen=True)
class AssetRoot:
    """Immutable set of mounts requests may be served from."""

    mounts: tuple[Mount, ...]

    def __post_init__(self) -> None:
        if not self.mounts:
            raise ValueError("AssetRoot requires at least one mount")
        prefixes = [mount.prefix for mount in self.mounts]
        if len(set(prefixes)) != len(prefixes):
            raise ValueError(f"Duplicate mount prefixes: {prefixes}")

    @classmethod
    def single(cls, directory: Path, prefix: str = "/") -> AssetRoot:
        return cls(mounts=(Mount.create(prefix, directory),))

    def match(self, path: URLPath) -> tuple[Mount, str] | None:
        """Find the mount with the longest prefix covering path.

        Returns:
            Tuple of (mount, relative path) or None if no mount covers path
        """
        best: tuple[Mount, str] | None = None
        for mount in self.mounts:
            relative = mount.relative(path)
            if relative is None:
                continue
            if best is None or len(mount.prefix) > len(best[0].prefix):
                best = (mount, relative)
        return best


@dataclass(frozen=True)
class Allowed:
    """Path may be served from mount."""

    path: URLPath
    mount: Mount
    relative: str


@dataclass(frozen=True)
class Denied:
    """Path is forbidden by policy."""

    path: str
    reason: str


PolicyDecision = Allowed | Denied


class AccessPolicy:
    """Evaluates request paths against mounts and deny patterns."""

    def __init__(
        self,
        root: AssetRoot,
        deny_patterns: tuple[str, ...] | list[str] = DEFAULT_DENY_PATTERNS,
    ) -> None:
        """Initialize policy.

        Args:
            root: Mounts that may be served
            deny_patterns: fnmatch globs that are always forbidden
        """
        self._root = root
        self._deny_patterns = tuple(deny_patterns)

    @property
    def root(self) -> AssetRoot:
        return self._root

    @property
    def deny_patterns(self) -> tuple[str, ...]:
        return self._deny_patterns

    def check(self, raw_path: str) -> PolicyDecision:
        """Decide whether raw_path may be served.

        Args:
            raw_path: URL-decoded request path

        Returns:
            Allowed with the normalized path and matched mount, or Denied
            with the reason
        """
        try:
            path = normalize_path(raw_path)
        except PathRejected as e:
            return Denied(path=raw_path, reason=str(e))

        matched = self._root.match(path)
        if matched is None:
            return Denied(path=path, reason="path is outside every mount")
        mount, relative = matched

        pattern = self._denied_by(relative)
        if pattern is not None:
            return Denied(
                path=path,
                reason=f"path matches deny pattern {pattern!r}",
            )

        return Allowed(path=path, mount=mount, relative=relative)

    def _denied_by(self, relative: str) -> str | None:
        if not relative:
            return None
        segments = relative.split("/")
        for pattern in self._deny_patterns:
            if fnmatchcase(relative, pattern):
                return pattern
            if any(fnmatchcase(segment, pattern) for segment in segments):
                return pattern
        return None


def normalize_prefix(prefix: str) -> URLPath:
    """Normalize a mount prefix: leading slash, no trailing slash.

    The root prefix normalizes to "/".
    """
    stripped = prefix.strip("/")
    if not stripped:
        return URLPath("/")
    return normalize_path("/" + stripped)


def normalize_path(raw_path: str) -> URLPath:
    """Normalize a URL-decoded request path.

    Collapses duplicate slashes, drops "." segments and applies ".."
    segments. A trailing slash is preserved so directory requests stay
    recognizable.

    Raises:
        PathRejected: If the path contains a NUL byte or backslash, or a ".."
            segment would climb above the root
    """
    if "\x00" in raw_path:
        raise PathRejected("path contains a NUL byte")
    if "\\" in raw_path:
        raise PathRejected("path contains a backslash")

    segments: list[str] = []
    for segment in raw_path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if not segments:
                raise PathRejected("path escapes the asset root")
            segments.pop()
            continue
        segments.append(segment)

    normalized = "/" + "/".join(segments)
    if segments and raw_path.endswith("/"):
        normalized += "/"
    return URLPath(normalized)
