"""Application keys for type-safe app configuration access."""

from aiohttp import web

from staticgate.responder import AssetResponder

responder_key = web.AppKey("responder", AssetResponder)
