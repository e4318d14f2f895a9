"""Base LLM interface and the OpenAI implementation.

The oracle talks to the model only through BaseLLM, so tests can swap in
a mock and deployments can add providers without touching callers.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

import openai

logger = logging.getLogger(__name__)


class LLMProvider(Enum):
    """Supported LLM providers."""
    OPENAI = "openai"


@dataclass
class LLMConfig:
    """Configuration for LLM inference."""
    provider: LLMProvider
    model_name: str
    api_key: Optional[str] = None
    max_tokens: int = 1500
    temperature: float = 0.3
    timeout_seconds: float = 30.0
    # Ask the provider for a single JSON object
    json_mode: bool = True


@dataclass
class LLMResponse:
    """Response from LLM inference."""
    text: str
    model: str
    provider: str
    tokens_used: Optional[int] = None
    latency_ms: Optional[float] = None
    metadata: Optional[Dict] = None


class BaseLLM(ABC):
    """Abstract base class for LLM implementations."""

    # Longest prompt accepted before the request is refused locally
    MAX_PROMPT_LENGTH = 20000

    def __init__(self, config: LLMConfig):
        """Initialize LLM with configuration.

        Args:
            config: LLM configuration
        """
        self.config = config
        logger.info(
            "LLM_INITIALIZED",
            extra={
                "provider": config.provider.value,
                "model": config.model_name
            }
        )

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate response from LLM.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt for context
            **kwargs: Additional provider-specific parameters

        Returns:
            LLMResponse object

        Raises:
            ValueError: If prompt is invalid
        """

    def validate_prompt(self, prompt: str) -> bool:
        """Validate prompt before sending to LLM.

        Args:
            prompt: The prompt to validate

        Returns:
            True if valid, False otherwise
        """
        if not prompt or not prompt.strip():
            logger.warning("EMPTY_PROMPT")
            return False

        if len(prompt) > self.MAX_PROMPT_LENGTH:
            logger.warning(
                "PROMPT_TOO_LONG",
                extra={"length": len(prompt)}
            )
            return False

        return True


class OpenAILLM(BaseLLM):
    """OpenAI chat completions implementation."""

    def __init__(self, config: LLMConfig, client: Optional[openai.AsyncOpenAI] = None):
        """Initialize OpenAI LLM.

        Args:
            config: LLM configuration with API key
            client: Pre-built client (tests pass a mock)
        """
        super().__init__(config)

        if client is None and not config.api_key:
            raise ValueError("OpenAI API key required")

        self.client = client or openai.AsyncOpenAI(
            api_key=config.api_key,
            timeout=config.timeout_seconds,
        )

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate response using the OpenAI API.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            **kwargs: Overrides for model, temperature or max_tokens

        Returns:
            LLMResponse object
        """
        if not self.validate_prompt(prompt):
            raise ValueError("Invalid prompt")

        messages: List[Dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        model = kwargs.get("model", self.config.model_name)
        request = {
            "model": model,
            "messages": messages,
            "max_tokens": kwargs.get("max_tokens", self.config.max_tokens),
            "temperature": kwargs.get("temperature", self.config.temperature),
        }
        if self.config.json_mode:
            request["response_format"] = {"type": "json_object"}

        start_time = time.time()

        try:
            response = await self.client.chat.completions.create(**request)
        except Exception as e:
            logger.error(
                "OPENAI_GENERATION_FAILED",
                extra={
                    "model": model,
                    "error": str(e),
                    "error_type": type(e).__name__,
                }
            )
            raise

        latency_ms = (time.time() - start_time) * 1000
        generated_text = response.choices[0].message.content or ""
        tokens_used = response.usage.total_tokens if response.usage else None

        logger.info(
            "OPENAI_GENERATION_SUCCEEDED",
            extra={
                "model": model,
                "latency_ms": latency_ms,
                "tokens_used": tokens_used
            }
        )

        return LLMResponse(
            text=generated_text,
            model=model,
            provider=self.config.provider.value,
            tokens_used=tokens_used,
            latency_ms=latency_ms
        )


def create_llm(config: LLMConfig) -> BaseLLM:
    """Factory function to create LLM instance.

    Args:
        config: LLM configuration

    Returns:
        BaseLLM instance

    Raises:
        ValueError: If provider not supported
    """
    if config.provider == LLMProvider.OPENAI:
        return OpenAILLM(config)
    raise ValueError(f"Unsupported provider: {config.provider}")
