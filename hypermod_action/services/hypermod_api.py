"""Deployment source client.

Fetches the deployment to run and reports the resulting pull request back
so the deployment can be tracked across runs.
"""

from typing import Any

import httpx
from pydantic import ValidationError

from hypermod_action.core.exceptions import DeploymentFetchError
from hypermod_action.models.deployment import Deployment
from hypermod_action.utils.logging import get_logger

DEFAULT_HYPERMOD_API = "https://www.hypermod.io"


class HypermodAPI:
    """Client for the deployment endpoints of the hypermod API."""

    def __init__(
        self,
        deployment_id: str,
        deployment_key: str,
        repo: str,
        base_url: str = DEFAULT_HYPERMOD_API,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.deployment_id = deployment_id
        self.deployment_key = deployment_key
        self.repo = repo
        self.logger = get_logger("hypermod_api")
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "HypermodAPI":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def deployment_path(self) -> str:
        return (
            f"/api/action/{self.deployment_id}/{self.deployment_key}"
            f"/deployment/{self.repo}"
        )

    async def fetch_deployment(self) -> Deployment:
        """Fetch and validate the deployment.

        Raises:
            DeploymentFetchError: If the source is unreachable, answers with a
                non-success status or serves an invalid payload
        """
        self.logger.info("hypermod_api.fetching", deployment_id=self.deployment_id)
        try:
            response = await self._client.get(self.deployment_path)
        except httpx.HTTPError as e:
            raise DeploymentFetchError(str(e)) from e

        if not response.is_success:
            raise DeploymentFetchError(
                f"status {response.status_code}", status_code=response.status_code
            )

        try:
            deployment = Deployment.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise DeploymentFetchError(f"invalid payload: {e}") from e

        self.logger.info(
            "hypermod_api.fetched",
            deployment_id=deployment.id,
            entries=len(deployment.transforms),
        )
        return deployment

    async def report_result(self, pull_request_number: int) -> bool:
        """Publish the pull request number. Failures are logged, not raised."""
        try:
            response = await self._client.post(
                self.deployment_path,
                json={"pullRequestNumber": pull_request_number},
            )
        except httpx.HTTPError as e:
            self.logger.warning("hypermod_api.report_failed", error=str(e))
            return False

        if not response.is_success:
            self.logger.warning(
                "hypermod_api.report_failed", status_code=response.status_code
            )
            return False

        self.logger.info(
            "hypermod_api.reported", pull_request_number=pull_request_number
        )
        return True
