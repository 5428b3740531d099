"""Mapping from resolution outcomes to HTTP responses.

Shared by the API Gateway adapter and the local aiohttp server so both
return the same status codes, headers and bodies:

    Found      -> 200 (or 304 when If-None-Match matches the ETag)
    Forbidden  -> 403
    NotFound   -> 404, optionally with a custom error page body
    read error -> 500
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from email.utils import formatdate
from hashlib import md5

from staticgate.config import Config
from staticgate.core.content_types import DEFAULT_BINARY_MEDIA_TYPES, is_binary
from staticgate.core.outcome import Forbidden, Found, NotFound, ResolutionOutcome
from staticgate.core.resolver import StaticAssetResolver
from staticgate.errors import AssetReadError

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class AssetResponse:
    """Host-neutral HTTP response."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    binary: bool = False


def create_responder(config: Config) -> AssetResponder:
    """Build a responder from the assets and response sections."""
    return AssetResponder(
        config.build_resolver(),
        cache_control=config.response.cache_control,
        binary_media_types=config.response.binary_media_types,
        error_page=config.assets.error_page,
    )


class AssetResponder:
    """Resolves request paths and renders the outcome as an AssetResponse."""

    def __init__(
        self,
        resolver: StaticAssetResolver,
        *,
        cache_control: str = "public, max-age=3600",
        binary_media_types: tuple[str, ...] | list[str] = DEFAULT_BINARY_MEDIA_TYPES,
        error_page: str | None = None,
    ) -> None:
        """Initialize responder.

        Args:
            resolver: Resolver for request paths
            cache_control: Cache-Control header for found assets
            binary_media_types: Content types returned as binary
            error_page: Request path of a page used as the 404 body
        """
        self._resolver = resolver
        self._cache_control = cache_control
        self._binary_media_types = tuple(binary_media_types)
        self._error_page = error_page

    @property
    def resolver(self) -> StaticAssetResolver:
        return self._resolver

    def respond(
        self,
        path: str,
        *,
        prefix: str | None = None,
        if_none_match: str | None = None,
    ) -> AssetResponse:
        """Resolve path and build the response.

        Args:
            path: URL-decoded request path
            prefix: Optional subdirectory prefix prepended to path
            if_none_match: Value of the If-None-Match request header

        Returns:
            AssetResponse ready to be converted by a host adapter
        """
        try:
            outcome = self._resolver.resolve(path, prefix)
        except AssetReadError:
            logger.exception(f"Failed to serve {path!r}")
            return self._error(500, "Internal Server Error", path)

        return self.render(outcome, if_none_match=if_none_match)

    def render(
        self,
        outcome: ResolutionOutcome,
        *,
        if_none_match: str | None = None,
    ) -> AssetResponse:
        match outcome:
            case Found():
                return self._found(outcome, if_none_match)
            case Forbidden():
                return self._error(403, "Forbidden", outcome.path)
            case NotFound():
                return self._not_found(outcome)

    def _found(self, found: Found, if_none_match: str | None) -> AssetResponse:
        etag = compute_etag(found.body)
        headers = {
            "ETag": etag,
            "Last-Modified": formatdate(found.mtime, usegmt=True),
            "Cache-Control": self._cache_control,
        }
        if if_none_match is not None and _etag_matches(etag, if_none_match):
            return AssetResponse(status=304, headers=headers)

        headers["Content-Type"] = found.content_type
        headers["Content-Length"] = str(found.size)
        return AssetResponse(
            status=200,
            headers=headers,
            body=found.body,
            binary=is_binary(found.content_type, self._binary_media_types),
        )

    def _not_found(self, outcome: NotFound) -> AssetResponse:
        if self._error_page is not None:
            try:
                page = self._resolver.resolve(self._error_page)
            except AssetReadError:
                logger.exception(f"Failed to read error page {self._error_page!r}")
                page = None
            if isinstance(page, Found):
                return AssetResponse(
                    status=404,
                    headers={
                        "Content-Type": page.content_type,
                        "Content-Length": str(page.size),
                        "Cache-Control": "no-cache",
                    },
                    body=page.body,
                    binary=is_binary(page.content_type, self._binary_media_types),
                )
            logger.warning(f"Error page {self._error_page!r} is not servable")

        return self._error(404, "Not Found", outcome.path)

    @staticmethod
    def _error(status: int, message: str, path: str) -> AssetResponse:
        body = json.dumps({"error": message, "path": path}).encode("utf-8")
        return AssetResponse(
            status=status,
            headers={
                "Content-Type": JSON_CONTENT_TYPE,
                "Content-Length": str(len(body)),
                "Cache-Control": "no-cache",
            },
            body=body,
        )


def compute_etag(content: bytes) -> str:
    # First 16 hex chars (64 bits) are enough for cache validation
    content_hash = md5(content, usedforsecurity=False).hexdigest()[:16]
    return f'"{content_hash}"'


def _etag_matches(etag: str, header: str) -> bool:
    tags = {tag.strip() for tag in header.split(",")}
    if "*" in tags:
        return True
    # Weak comparison: W/"abc" matches "abc"
    return etag in {tag[2:] if tag.startswith("W/") else tag for tag in tags}
