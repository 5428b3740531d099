"""Static asset resolution and access control for API Gateway and Lambda."""

from staticgate.core.outcome import Forbidden, Found, NotFound, ResolutionOutcome
from staticgate.core.policy import AccessPolicy, AssetRoot, Mount
from staticgate.core.resolver import StaticAssetResolver
from staticgate.errors import AssetReadError, StaticGateError

__all__ = [
    "AccessPolicy",
    "AssetReadError",
    "AssetRoot",
    "Forbidden",
    "Found",
    "Mount",
    "NotFound",
    "ResolutionOutcome",
    "StaticAssetResolver",
    "StaticGateError",
]
