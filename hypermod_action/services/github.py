"""GitHub pull request service.

Thin async REST client for the three pull request calls the reconciler
needs. Primary and secondary rate limits are retried after the server
supplied delay, up to ``max_retries`` times per call.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from hypermod_action.core.exceptions import GitHubAPIError, RateLimitExceededError
from hypermod_action.models.reconciliation import PullRequest
from hypermod_action.utils.logging import get_logger

DEFAULT_GITHUB_API = "https://api.github.com"
DEFAULT_MAX_RETRIES = 2

# Delay used when a secondary limit carries no Retry-After header
SECONDARY_RATE_LIMIT_DELAY = 60.0

Sleep = Callable[[float], Awaitable[Any]]


def rate_limit_delay(response: httpx.Response, now: float | None = None) -> float | None:
    """Seconds to wait before retrying, or None if not rate limited.

    A primary limit is a 403/429 with ``x-ratelimit-remaining: 0`` and waits
    until ``x-ratelimit-reset``. A secondary limit is a 403/429 carrying
    ``retry-after`` or a "secondary rate limit" message.
    """
    if response.status_code not in (403, 429):
        return None

    retry_after = response.headers.get("retry-after")
    if retry_after is not None:
        try:
            return max(float(retry_after), 0.0)
        except ValueError:
            return SECONDARY_RATE_LIMIT_DELAY

    if response.headers.get("x-ratelimit-remaining") == "0":
        reset = response.headers.get("x-ratelimit-reset")
        if reset is None:
            return SECONDARY_RATE_LIMIT_DELAY
        now = time.time() if now is None else now
        return max(float(reset) - now, 0.0)

    if response.status_code == 429 or "secondary rate limit" in response.text.lower():
        return SECONDARY_RATE_LIMIT_DELAY

    return None


class GitHubClient:
    """Pull request search/create/update scoped to one repository.

    Args:
        token: GitHub token with ``pull-requests: write``
        repo: Repository in "owner/repo" format
        base_url: API base URL (override for GitHub Enterprise)
        max_retries: Rate limit retries allowed per call
        transport: Optional httpx transport, used by tests
        sleep: Coroutine used to wait out rate limits
    """

    def __init__(
        self,
        token: str,
        repo: str,
        base_url: str = DEFAULT_GITHUB_API,
        max_retries: int = DEFAULT_MAX_RETRIES,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.repo = repo
        self.max_retries = max_retries
        self._sleep = sleep
        self.logger = get_logger("github")
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "hypermod-action",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def search_open_pull_request(self, head: str, base: str) -> PullRequest | None:
        """Find the open pull request from ``head`` into ``base``, if any."""
        query = f"repo:{self.repo} state:open head:{head} base:{base} is:pull-request"
        data = await self._request("GET", "/search/issues", params={"q": query})
        items = data.get("items", [])
        self.logger.info(
            "github.search.completed",
            head=head,
            base=base,
            total_count=data.get("total_count", len(items)),
        )
        if not items:
            return None
        return PullRequest.model_validate(items[0])

    async def create_pull_request(self, base: str, head: str, title: str, body: str) -> int:
        data = await self._request(
            "POST",
            f"/repos/{self.repo}/pulls",
            json={"base": base, "head": head, "title": title, "body": body},
        )
        return int(data["number"])

    async def update_pull_request(self, number: int, title: str, body: str) -> None:
        await self._request(
            "PATCH",
            f"/repos/{self.repo}/pulls/{number}",
            json={"title": title, "body": body},
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        retry_count = 0
        while True:
            response = await self._client.request(method, url, **kwargs)

            delay = rate_limit_delay(response)
            if delay is None:
                break

            self.logger.warning(
                "github.rate_limited",
                method=method,
                url=url,
                status_code=response.status_code,
                retry_count=retry_count,
            )
            if retry_count >= self.max_retries:
                raise RateLimitExceededError(method, url, attempts=retry_count + 1)

            self.logger.info("github.retrying", method=method, url=url, after_seconds=delay)
            await self._sleep(delay)
            retry_count += 1

        if response.is_error:
            raise GitHubAPIError(
                f"GitHub API {method} {url} returned {response.status_code}: "
                f"{response.text[:200]}",
                status_code=response.status_code,
            )

        if not response.content:
            return {}
        return response.json()
