"""
Base agent abstraction.

Provides the core Agent interface with type-safe inputs/outputs,
automatic retries, schema validation of responses, and LLM provider abstraction.
"""

from __future__ import annotations

import hashlib
import json
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaError
from tenacity import retry, retry_if_not_exception_type, stop_after_attempt, wait_exponential

from ..core.config import AgentConfig, get_config
from ..core.exceptions import AgentError
from ..core.logging import get_logger

logger = get_logger(__name__)

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AgentContext(BaseModel):
    """Context passed to agent invocations."""

    session_id: str = Field(description="Build session identifier")
    stage: str = Field(description="Current pipeline stage")
    timestamp: datetime = Field(default_factory=_utcnow)

    # Configuration overrides
    temperature_override: float | None = Field(default=None)
    max_tokens_override: int | None = Field(default=None)


class AgentResponse(BaseModel, Generic[OutputT]):
    """Response from an agent invocation."""

    success: bool = Field(description="Whether the invocation succeeded")
    output: OutputT | None = Field(default=None)
    error: str | None = Field(default=None)

    # Metrics
    prompt_tokens: int = Field(default=0)
    completion_tokens: int = Field(default=0)
    total_tokens: int = Field(default=0)
    latency_ms: float = Field(default=0.0)

    # Provenance
    model_used: str = Field(default="")
    prompt_hash: str = Field(default="")
    timestamp: datetime = Field(default_factory=_utcnow)


@dataclass
class PromptTemplate:
    """A versioned prompt template."""

    template_id: str
    version: str
    system_prompt: str
    user_prompt_template: str
    output_format_instructions: str = ""

    def render_system(self) -> str:
        return self.system_prompt

    def render_user(self, **kwargs: Any) -> str:
        """Render the user prompt with variables.

        Args:
            **kwargs: Template variables to substitute in the user prompt.

        Returns:
            str: The rendered user prompt with output format instructions appended
                if available.
        """
        prompt = self.user_prompt_template.format(**kwargs)
        if self.output_format_instructions:
            prompt += f"\n\n{self.output_format_instructions}"
        return prompt

    def get_hash(self) -> str:
        """Get a 16-character deterministic hash of the template."""
        content = f"{self.template_id}:{self.version}:{self.system_prompt}:{self.user_prompt_template}"
        return hashlib.sha256(content.encode()).hexdigest()[:16]


def create_client(config: AgentConfig, agent_name: str) -> Any:
    """Create the async SDK client for the configured provider.

    Raises:
        AgentError: If the configured provider is unknown.
    """
    if config.provider == "openai":
        import openai
        return openai.AsyncOpenAI(timeout=config.timeout_seconds)
    if config.provider == "anthropic":
        import anthropic
        return anthropic.AsyncAnthropic(timeout=config.timeout_seconds)
    if config.provider == "azure_openai":
        import openai
        return openai.AsyncAzureOpenAI(
            azure_endpoint=config.azure_endpoint,
            api_version=config.azure_api_version,
            timeout=config.timeout_seconds,
        )
    raise AgentError(
        message=f"Unknown provider: {config.provider}",
        agent_name=agent_name,
        operation="get_client",
    )


class Agent(ABC, Generic[InputT, OutputT]):
    """Base class for all webdroid agents.

    Agents are stateless, type-safe wrappers around LLM invocations with
    automatic retry logic, output validation, and comprehensive logging.
    """

    def __init__(
        self,
        config: AgentConfig | None = None,
    ) -> None:
        """Initialize the agent.

        Args:
            config: Agent configuration. Uses global config if not provided.
        """
        self.config = config or get_config().agent
        self._client: Any = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique agent name."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Agent description."""
        ...

    @property
    @abstractmethod
    def input_type(self) -> type[InputT]:
        """Pydantic model type for input."""
        ...

    @property
    @abstractmethod
    def output_type(self) -> type[OutputT]:
        """Pydantic model type for output."""
        ...

    @abstractmethod
    def get_prompt_template(self) -> PromptTemplate:
        """Get the prompt template for this agent."""
        ...

    @abstractmethod
    def prepare_input(self, input_data: InputT) -> dict[str, Any]:
        """Prepare input data for prompt rendering.

        This method transforms the typed input into a dictionary
        that can be used to render the prompt template.

        Args:
            input_data: The validated input data.

        Returns:
            dict[str, Any]: Dictionary of template variables for prompt rendering.
        """
        ...

    def validate_output(self, output: OutputT) -> list[str]:
        """Validate the agent output and return any warnings.

        Override this method to add custom validation logic.
        """
        return []

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = create_client(self.config, self.name)
        return self._client

    def _model_name(self) -> str:
        if self.config.provider == "azure_openai" and self.config.azure_deployment_name:
            return self.config.azure_deployment_name
        return self.config.model

    async def _call_llm(
        self,
        system_prompt: str,
        user_prompt: str,
        context: AgentContext,
    ) -> tuple[str, dict[str, int]]:
        """Call the LLM and return the response text and token counts.

        Raises:
            AgentError: If the configured provider is unknown.
        """
        client = self._get_client()

        temperature = context.temperature_override or self.config.temperature
        max_tokens = context.max_tokens_override or self.config.max_tokens
        model_name = self._model_name()

        logger.info(
            "LLM request starting",
            provider=self.config.provider,
            model=model_name,
            temperature=temperature,
            max_tokens=max_tokens,
            user_prompt_chars=len(user_prompt),
        )

        if self.config.provider in ("openai", "azure_openai"):
            response = await client.chat.completions.create(
                model=model_name,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_completion_tokens=max_tokens,
                response_format={"type": "json_object"},
            )

            response_text = response.choices[0].message.content or ""
            token_counts = {
                "prompt_tokens": response.usage.prompt_tokens if response.usage else 0,
                "completion_tokens": response.usage.completion_tokens if response.usage else 0,
                "total_tokens": response.usage.total_tokens if response.usage else 0,
            }

        elif self.config.provider == "anthropic":
            response = await client.messages.create(
                model=model_name,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )

            response_text = response.content[0].text if response.content else ""
            token_counts = {
                "prompt_tokens": response.usage.input_tokens,
                "completion_tokens": response.usage.output_tokens,
                "total_tokens": response.usage.input_tokens + response.usage.output_tokens,
            }

        else:
            raise AgentError(
                message=f"Unknown provider: {self.config.provider}",
                agent_name=self.name,
                operation="call_llm",
            )

        logger.info(
            "LLM response received",
            provider=self.config.provider,
            model=model_name,
            prompt_tokens=token_counts["prompt_tokens"],
            completion_tokens=token_counts["completion_tokens"],
            response_chars=len(response_text),
        )
        return response_text, token_counts

    def _parse_output(self, response_text: str) -> OutputT:
        """Parse LLM response into output type.

        Raises:
            AgentError: If the response is empty, not JSON, or does not match
                the output schema.
        """
        if not response_text.strip():
            raise AgentError(
                message="Empty response from model",
                agent_name=self.name,
                operation="parse_output",
            )
        try:
            data = json.loads(_strip_code_fence(response_text))
            return self.output_type.model_validate(data)
        except json.JSONDecodeError as e:
            raise AgentError(
                message=f"Failed to parse JSON response: {e}",
                agent_name=self.name,
                operation="parse_output",
                cause=e,
            )
        except SchemaError as e:
            raise AgentError(
                message=f"Response does not match {self.output_type.__name__}: {e.error_count()} error(s)",
                agent_name=self.name,
                operation="parse_output",
                cause=e,
            )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_not_exception_type(AgentError),
        reraise=True,
    )
    async def _invoke_with_retry(
        self,
        system_prompt: str,
        user_prompt: str,
        context: AgentContext,
    ) -> tuple[OutputT, dict[str, int]]:
        """Invoke LLM with retry logic.

        Transport errors are retried with exponential backoff (up to 3
        attempts); malformed responses are not.
        """
        response_text, token_counts = await self._call_llm(
            system_prompt, user_prompt, context
        )
        output = self._parse_output(response_text)
        return output, token_counts

    async def invoke(
        self,
        input_data: InputT,
        context: AgentContext,
    ) -> AgentResponse[OutputT]:
        """Invoke the agent with the given input.

        Never raises: any failure is reported through ``AgentResponse.error``.

        Args:
            input_data: Validated input data matching the agent's input type.
            context: Invocation context with session metadata and config overrides.

        Returns:
            AgentResponse[OutputT]: Response containing either the validated output
                or an error message, along with metrics and provenance data.
        """
        start_time = time.perf_counter()
        prompt_template = self.get_prompt_template()
        prompt_hash = prompt_template.get_hash()

        try:
            template_vars = self.prepare_input(input_data)
            system_prompt = prompt_template.render_system()
            user_prompt = prompt_template.render_user(**template_vars)

            logger.info(
                "Agent invocation started",
                agent=self.name,
                session_id=context.session_id,
                prompt_hash=prompt_hash,
            )

            output, token_counts = await self._invoke_with_retry(
                system_prompt, user_prompt, context
            )

            warnings = self.validate_output(output)
            if warnings:
                logger.warning(
                    "Agent output warnings",
                    agent=self.name,
                    warnings=warnings,
                )

            latency_ms = (time.perf_counter() - start_time) * 1000

            logger.info(
                "Agent invocation completed",
                agent=self.name,
                latency_ms=latency_ms,
                tokens=token_counts["total_tokens"],
            )

            return AgentResponse(
                success=True,
                output=output,
                prompt_tokens=token_counts["prompt_tokens"],
                completion_tokens=token_counts["completion_tokens"],
                total_tokens=token_counts["total_tokens"],
                latency_ms=latency_ms,
                model_used=self._model_name(),
                prompt_hash=prompt_hash,
            )

        except Exception as e:
            latency_ms = (time.perf_counter() - start_time) * 1000

            logger.error(
                "Agent invocation failed",
                agent=self.name,
                error=str(e),
                latency_ms=latency_ms,
            )

            return AgentResponse(
                success=False,
                output=None,
                error=str(e),
                latency_ms=latency_ms,
                model_used=self._model_name(),
                prompt_hash=prompt_hash,
            )


def _strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json fence some models add despite instructions."""
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped.split("\n", 1)[1] if "\n" in stripped else ""
        if stripped.rstrip().endswith("```"):
            stripped = stripped.rstrip()[:-3]
    return stripped
