"""aiohttp server for staticgate.

Serves the configured assets over HTTP for local end-to-end testing, with
the same outcomes the Lambda handler produces behind API Gateway.
"""

from aiohttp import web

from staticgate.api.assets import create_asset_routes
from staticgate.app_keys import responder_key
from staticgate.config import Config
from staticgate.responder import create_responder


def create_app(config: Config) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration

    Returns:
        Configured aiohttp application
    """
    app = web.Application()
    app[responder_key] = create_responder(config)
    app.router.add_routes(create_asset_routes())
    return app


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port)
