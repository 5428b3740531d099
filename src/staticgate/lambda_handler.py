"""AWS Lambda entry point for API Gateway proxy integrations.

Translates proxy events into resolver calls and AssetResponses back into
proxy response dicts. Binary bodies are base64 encoded with
``isBase64Encoded`` set; the API must list matching binary media types for
API Gateway to decode them.

Deploy with the handler ``staticgate.lambda_handler.handler``. Configuration
is read from the file named by ``STATICGATE_CONFIG``, or discovered from the
working directory (the Lambda task root).
"""

from __future__ import annotations

import base64
import logging
import os
from pathlib import Path
from typing import Any
from urllib.parse import unquote

from staticgate.config import Config
from staticgate.responder import AssetResponder, AssetResponse, create_responder

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "STATICGATE_CONFIG"
PROXY_SUFFIX = "/{proxy+}"
ALLOWED_METHODS = ("GET", "HEAD")


class StaticFileHandler:
    """Serves static assets for API Gateway proxy events."""

    def __init__(self, responder: AssetResponder) -> None:
        self._responder = responder

    @classmethod
    def from_config(cls, config: Config) -> StaticFileHandler:
        return cls(create_responder(config))

    def handle(self, event: dict[str, Any], context: object = None) -> dict[str, Any]:
        """Handle an API Gateway proxy event (REST v1 or HTTP API v2 payload).

        Args:
            event: Proxy integration event
            context: Lambda context (unused)

        Returns:
            Proxy integration response dict
        """
        method = _request_method(event)
        if method not in ALLOWED_METHODS:
            return {
                "statusCode": 405,
                "headers": {"Allow": ", ".join(ALLOWED_METHODS)},
                "body": "",
                "isBase64Encoded": False,
            }

        path, prefix = request_path(event)
        headers = {key.lower(): value for key, value in (event.get("headers") or {}).items()}
        response = self._responder.respond(
            path,
            prefix=prefix,
            if_none_match=headers.get("if-none-match"),
        )
        logger.info(f"{method} {prefix or ''}{path} -> {response.status}")
        return to_proxy_response(response, head=method == "HEAD")


def request_path(event: dict[str, Any]) -> tuple[str, str | None]:
    """Extract the request path and resource prefix from a proxy event.

    For resources like ``/binary/{proxy+}`` the proxy path parameter is
    combined with the ``/binary`` prefix. Otherwise the event path is used
    as is. REST API events never include the stage name in either field.

    Returns:
        Tuple of (URL-decoded path, prefix or None)
    """
    path_parameters = event.get("pathParameters") or {}
    proxy = path_parameters.get("proxy")
    resource = event.get("resource") or ""
    if proxy is not None and resource.endswith(PROXY_SUFFIX):
        prefix = resource[: -len(PROXY_SUFFIX)] or "/"
        return unquote(proxy), prefix

    raw = event.get("path") or event.get("rawPath") or "/"
    return unquote(raw), None


def to_proxy_response(response: AssetResponse, *, head: bool = False) -> dict[str, Any]:
    """Convert an AssetResponse into a proxy integration response."""
    if head or not response.body:
        body = ""
        encoded = False
    elif response.binary:
        body = base64.b64encode(response.body).decode("ascii")
        encoded = True
    else:
        try:
            body = response.body.decode("utf-8")
            encoded = False
        except UnicodeDecodeError:
            body = base64.b64encode(response.body).decode("ascii")
            encoded = True

    return {
        "statusCode": response.status,
        "headers": dict(response.headers),
        "body": body,
        "isBase64Encoded": encoded,
    }


def _request_method(event: dict[str, Any]) -> str:
    method = event.get("httpMethod")
    if method is None:
        http = (event.get("requestContext") or {}).get("http") or {}
        method = http.get("method") or "GET"
    return str(method).upper()


_handler: StaticFileHandler | None = None


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    """Lambda entry point; builds the handler on first invocation."""
    global _handler
    if _handler is None:
        config_path = os.environ.get(CONFIG_ENV_VAR)
        config = Config.load(Path(config_path) if config_path else None)
        _handler = StaticFileHandler.from_config(config)
    return _handler.handle(event, context)
