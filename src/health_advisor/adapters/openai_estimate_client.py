"""OpenAI Responses API client for calorie estimates."""

import json
from collections.abc import Sequence
from dataclasses import dataclass

from openai import AsyncOpenAI

from health_advisor.services.ai_estimator import (
    ESTIMATE_SCHEMA,
    EstimateClient,
    build_estimate_prompt,
)


@dataclass
class OpenAIEstimateClient(EstimateClient):
    """Estimate client backed by OpenAI structured outputs."""

    client: AsyncOpenAI
    model: str
    reasoning_effort: str | None
    store: bool

    @classmethod
    def create(
        cls,
        api_key: str,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
    ) -> "OpenAIEstimateClient":
        """Create an OpenAI estimate client."""
        return cls(
            client=AsyncOpenAI(api_key=api_key),
            model=model,
            reasoning_effort=reasoning_effort,
            store=store,
        )

    async def estimate(
        self, *, text: str, recent_groceries: Sequence[str]
    ) -> dict[str, object]:
        """Call the Responses API and return the parsed JSON payload."""
        request_payload: dict[str, object] = {
            "model": self.model,
            "instructions": build_estimate_prompt(recent_groceries),
            "input": [
                {
                    "role": "user",
                    "content": [{"type": "input_text", "text": text}],
                }
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": "calorie_estimate",
                    "strict": True,
                    "schema": ESTIMATE_SCHEMA,
                }
            },
            "store": self.store,
        }
        if self.reasoning_effort:
            request_payload["reasoning"] = {"effort": self.reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return json.loads(output_text)

    async def close(self) -> None:
        """Close the underlying OpenAI HTTP session."""
        await self.client.close()
