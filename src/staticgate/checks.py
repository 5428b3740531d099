"""HTTP acceptance checks against a running deployment.

Requests each expected path from a base URL (a deployed API Gateway stage
or a local server) and compares the status code with the expected one.
"""

import asyncio
import logging
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Expectation:
    """Expected status code for a request path."""

    path: str
    status: int = 200


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single acceptance check."""

    expectation: Expectation
    actual: int | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.actual == self.expectation.status


DEFAULT_EXPECTATIONS: tuple[Expectation, ...] = (
    Expectation("/binary/png.png", 200),
    Expectation("/binary/jpg.jpg", 200),
    Expectation("/binary/glyphicons-halflings-regular.woff2", 200),
    Expectation("/binary/subdir/png.png", 200),
    Expectation("/ff404.png", 403),
    Expectation("/jpeg404.jpg", 403),
    Expectation("/subdir404/ff.png", 403),
    Expectation("/subdir/ff404.png", 403),
    Expectation("/binary/404-glyphicons-halflings-regular.woff2", 404),
    Expectation("/binary/subdir/404-png.png", 404),
)


async def run_checks(
    base_url: str,
    expectations: list[Expectation] | tuple[Expectation, ...] = DEFAULT_EXPECTATIONS,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float = 10.0,
) -> list[CheckResult]:
    """Run acceptance checks concurrently.

    Args:
        base_url: URL the paths are appended to (e.g. the stage URL)
        expectations: Paths and expected status codes
        client: Optional client to use; one is created and closed otherwise
        timeout: Per-request timeout in seconds when creating a client

    Returns:
        One CheckResult per expectation, in the same order
    """
    if client is not None:
        return await _run_all(client, base_url, expectations)

    async with httpx.AsyncClient(timeout=timeout, follow_redirects=False) as owned:
        return await _run_all(owned, base_url, expectations)


async def _run_all(
    client: httpx.AsyncClient,
    base_url: str,
    expectations: list[Expectation] | tuple[Expectation, ...],
) -> list[CheckResult]:
    root = base_url.rstrip("/")
    return list(
        await asyncio.gather(
            *(_check_one(client, root, expectation) for expectation in expectations),
        ),
    )


async def _check_one(
    client: httpx.AsyncClient,
    root: str,
    expectation: Expectation,
) -> CheckResult:
    url = f"{root}/{expectation.path.lstrip('/')}"
    try:
        response = await client.get(url)
    except httpx.HTTPError as e:
        logger.warning(f"Request to {url} failed: {e}")
        return CheckResult(expectation=expectation, actual=None, error=str(e) or type(e).__name__)

    logger.debug(f"GET {url} -> {response.status_code}")
    return CheckResult(expectation=expectation, actual=response.status_code)
