"""Content type inference by file extension.

Also decides which content types are "binary media types": bodies that
have to be base64 encoded when returned through an API Gateway proxy
integration.
"""

import mimetypes
from fnmatch import fnmatchcase

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Extensions that mimetypes either misses or maps inconsistently across
# platforms (e.g. .woff2 is absent from older mime.types files).
_EXTRA_TYPES: dict[str, str] = {
    ".woff2": "font/woff2",
    ".woff": "font/woff",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".eot": "application/vnd.ms-fontobject",
    ".webp": "image/webp",
    ".avif": "image/avif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".json": "application/json",
    ".map": "application/json",
    ".webmanifest": "application/manifest+json",
    ".wasm": "application/wasm",
}

_TEXT_APPLICATION_TYPES = frozenset(
    {
        "application/json",
        "application/manifest+json",
        "application/javascript",
        "application/xml",
        "image/svg+xml",
    },
)

DEFAULT_BINARY_MEDIA_TYPES: tuple[str, ...] = (
    "image/*",
    "font/*",
    "audio/*",
    "video/*",
    "application/octet-stream",
    "application/pdf",
    "application/zip",
    "application/gzip",
    "application/wasm",
    "application/vnd.ms-fontobject",
    "application/font-woff*",
)


def guess_content_type(name: str) -> str:
    """Infer the Content-Type header value for a file name.

    Text types carry a UTF-8 charset parameter.

    Args:
        name: File name or path; only the extension is used

    Returns:
        Content-Type value, "application/octet-stream" if unknown
    """
    dot = name.rfind(".")
    extension = name[dot:].lower() if dot != -1 else ""
    content_type = _EXTRA_TYPES.get(extension)
    if content_type is None:
        content_type, _ = mimetypes.guess_type(name, strict=False)
    if content_type is None:
        return DEFAULT_CONTENT_TYPE
    if content_type.startswith("text/") or content_type in _TEXT_APPLICATION_TYPES:
        return f"{content_type}; charset=utf-8"
    return content_type


def is_binary(
    content_type: str,
    binary_media_types: tuple[str, ...] | list[str] = DEFAULT_BINARY_MEDIA_TYPES,
) -> bool:
    """Check whether a content type must be transferred base64 encoded.

    Args:
        content_type: Content-Type value, parameters are ignored
        binary_media_types: Patterns such as "image/*" or "application/pdf"

    Returns:
        True if content_type matches any pattern
    """
    media_type = content_type.split(";", 1)[0].strip().lower()
    # SVG is served as text even though it matches image/*
    if media_type in _TEXT_APPLICATION_TYPES:
        return False
    return any(fnmatchcase(media_type, pattern.lower()) for pattern in binary_media_types)
