"""Static asset endpoint.

Catch-all GET route that serves assets with the same status codes and
headers as the API Gateway adapter.
"""

import logging

from aiohttp import web

from staticgate.app_keys import responder_key

logger = logging.getLogger(__name__)


def create_asset_routes() -> list[web.RouteDef]:
    # GET routes also answer HEAD requests
    return [
        web.get("/{path:.*}", get_asset),
    ]


async def get_asset(request: web.Request) -> web.Response:
    responder = request.app[responder_key]

    # request.path is already percent-decoded by aiohttp
    response = responder.respond(
        request.path,
        if_none_match=request.headers.get("If-None-Match"),
    )
    logger.debug(f"{request.method} {request.path} -> {response.status}")

    headers = {k: v for k, v in response.headers.items() if k != "Content-Length"}
    return web.Response(status=response.status, body=response.body, headers=headers)
