"""HTTPX client for a remote calorie estimation endpoint."""

from collections.abc import Sequence
from dataclasses import dataclass

import httpx

from health_advisor.services.ai_estimator import EstimateClient


@dataclass
class HttpxEstimateClient(EstimateClient):
    """Posts meal text to ``{base_url}/api/estimate-calories``."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 15

    @classmethod
    def create(cls, base_url: str, timeout: float = 15) -> "HttpxEstimateClient":
        """Create an estimate client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def estimate(
        self, *, text: str, recent_groceries: Sequence[str]
    ) -> dict[str, object]:
        """POST the meal text and return the JSON body."""
        response = await self.http_client.post(
            f"{self.base_url}/api/estimate-calories",
            json={"text": text, "recentGroceries": list(recent_groceries)},
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise RuntimeError("Estimate service returned a non-object payload")
        return payload

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
