"""
Icon Designer Agent.

Generates a launcher icon with an image generation model. Unlike the JSON
agents this one returns raw image bytes, so it does not derive from ``Agent``
but shares its client factory, retry policy and logging.
"""

from __future__ import annotations

import base64
import binascii
import time
from typing import Any

import httpx
from tenacity import retry, retry_if_not_exception_type, stop_after_attempt, wait_exponential

from ..core.config import AgentConfig, get_config
from ..core.exceptions import AgentError
from ..core.logging import get_logger
from .base import AgentContext, PromptTemplate, create_client

logger = get_logger(__name__)

ICON_PROMPT = PromptTemplate(
    template_id="icon_designer_v1",
    version="1.0.0",
    system_prompt="",
    user_prompt_template="""Design a modern, minimalist, vector-style app icon for an Android application named "{app_name}".
Description of the app: {description}.
The icon should be suitable for a mobile launcher (rounded square or adaptive shape).
High contrast, professional color palette. Flat design. No text.""",
)


class IconDesignerAgent:
    """Agent producing PNG launcher icons."""

    NAME = "icon_designer"

    def __init__(self, config: AgentConfig | None = None) -> None:
        self.config = config or get_config().agent
        self._client: Any = None

    @property
    def name(self) -> str:
        return self.NAME

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = create_client(self.config, self.name)
        return self._client

    def render_prompt(self, app_name: str, description: str) -> str:
        return ICON_PROMPT.render_user(app_name=app_name, description=description.strip())

    async def _download(self, url: str) -> bytes:
        async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
            response = await client.get(url, follow_redirects=True)
            response.raise_for_status()
            return response.content

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_not_exception_type(AgentError),
        reraise=True,
    )
    async def _generate_image(self, prompt: str) -> bytes:
        """Call the image endpoint and return the decoded image.

        Raises:
            AgentError: If the provider has no image endpoint or the response
                carries no image payload.
        """
        if self.config.provider == "anthropic":
            raise AgentError(
                message="Provider 'anthropic' has no image generation endpoint",
                agent_name=self.name,
                operation="generate_image",
            )

        client = self._get_client()
        model_name = self.config.image_model
        if self.config.provider == "azure_openai" and self.config.azure_deployment_name:
            model_name = self.config.azure_deployment_name

        response = await client.images.generate(
            model=model_name,
            prompt=prompt,
            size=self.config.image_size,
            n=1,
            response_format="b64_json",
        )

        image = response.data[0] if response.data else None
        if image is not None and image.b64_json:
            try:
                return base64.b64decode(image.b64_json)
            except (binascii.Error, ValueError) as e:
                raise AgentError(
                    message="Image payload is not valid base64",
                    agent_name=self.name,
                    operation="generate_image",
                    cause=e,
                )
        if image is not None and image.url:
            return await self._download(image.url)

        raise AgentError(
            message="No image generated",
            agent_name=self.name,
            operation="generate_image",
        )

    async def generate(self, app_name: str, description: str, context: AgentContext) -> bytes:
        """Generate an icon.

        Raises:
            AgentError: If no image could be produced.
        """
        start_time = time.perf_counter()
        prompt = self.render_prompt(app_name, description)

        logger.info(
            "Icon generation started",
            agent=self.name,
            session_id=context.session_id,
            model=self.config.image_model,
            prompt_hash=ICON_PROMPT.get_hash(),
        )

        try:
            data = await self._generate_image(prompt)
        except AgentError:
            raise
        except Exception as e:
            raise AgentError(
                message=f"Image request failed: {e}",
                agent_name=self.name,
                operation="generate_image",
                retryable=True,
                cause=e,
            )

        if not data:
            raise AgentError(
                message="Empty image payload",
                agent_name=self.name,
                operation="generate_image",
            )

        logger.info(
            "Icon generation completed",
            agent=self.name,
            size_bytes=len(data),
            latency_ms=(time.perf_counter() - start_time) * 1000,
        )
        return data
