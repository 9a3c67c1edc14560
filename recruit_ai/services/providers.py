"""
Text-generation provider gateway.

Hosted providers (OpenAI, xAI) speak the OpenAI chat-completions protocol; a
local Ollama server is reached through its /api/generate endpoint. Every
failure surfaces as ExternalServiceError; retries are opt-in through
``generate_with_retry``.
"""
import os
from enum import Enum
from typing import Any, Dict, List, Optional

import requests
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from recruit_ai.helpers.prompts import SYSTEM_PROMPT
from recruit_ai.utils.exceptions import ConfigurationError, ExternalServiceError, retry_with_logging
from recruit_ai.utils.logging_config import get_logger

load_dotenv()

logger = get_logger(__name__)


class ProviderName(str, Enum):
    OPENAI = "openai"
    XAI = "xai"
    OLLAMA = "ollama"


CHAT_COMPLETION_URLS = {
    ProviderName.OPENAI: "https://api.openai.com/v1/chat/completions",
    ProviderName.XAI: "https://api.x.ai/v1/chat/completions",
}

DEFAULT_MODELS = {
    ProviderName.OPENAI: "gpt-4o",
    ProviderName.XAI: "grok-3-mini",
    ProviderName.OLLAMA: "llama3",
}

AVAILABLE_MODELS: Dict[str, List[str]] = {
    ProviderName.OPENAI.value: ["gpt-4o", "gpt-4o-mini", "gpt-4-turbo", "gpt-4", "gpt-3.5-turbo"],
    ProviderName.XAI.value: [
        "grok-3-mini", "grok-3-mini-fast", "grok-3", "grok-3-fast",
        "grok-2-1212", "grok-2-vision-1212", "grok-beta",
    ],
    ProviderName.OLLAMA.value: ["llama3", "mistral", "llava:7b"],
}


class ProviderConfig(BaseModel):
    provider: ProviderName = ProviderName.OPENAI
    api_key: str = ""
    model: str = DEFAULT_MODELS[ProviderName.OPENAI]
    max_tokens: int = Field(default=1500, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    base_url: Optional[str] = None
    timeout: int = Field(default=120, ge=1)


class TokenUsage(BaseModel):
    total_tokens: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0


class ProviderResponse(BaseModel):
    text: str
    usage: Optional[TokenUsage] = None


def get_provider_config() -> ProviderConfig:
    """Build the provider configuration from the environment."""
    raw = os.getenv("AI_PROVIDER", ProviderName.OPENAI.value).lower()
    try:
        provider = ProviderName(raw)
    except ValueError:
        raise ConfigurationError(f"Unsupported AI provider: {raw}", config_key="AI_PROVIDER") from None

    prefix = provider.value.upper()
    api_key = os.getenv(f"{prefix}_API_KEY", "")
    if provider != ProviderName.OLLAMA and not api_key:
        raise ConfigurationError(f"{prefix} API key not configured", config_key=f"{prefix}_API_KEY")

    try:
        max_tokens = int(os.getenv("MAX_TOKENS", "1500"))
        temperature = float(os.getenv("TEMPERATURE", "0.7"))
    except ValueError as e:
        raise ConfigurationError(f"Invalid generation setting: {e}", cause=e) from e

    return ProviderConfig(
        provider=provider,
        api_key=api_key,
        model=os.getenv(f"{prefix}_MODEL") or DEFAULT_MODELS[provider],
        max_tokens=max_tokens,
        temperature=temperature,
        base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434") if provider == ProviderName.OLLAMA else None,
    )


def _post(url: str, config: ProviderConfig, **kwargs) -> dict:
    try:
        resp = requests.post(url, timeout=config.timeout, **kwargs)
        resp.raise_for_status()
        data = resp.json()
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        raise ExternalServiceError(
            f"{config.provider.value} API error: {status}",
            service_name=config.provider.value, status_code=status, cause=e,
        ) from e
    except (requests.RequestException, ValueError) as e:
        raise ExternalServiceError(
            f"Failed to generate text with {config.provider.value}: {e}",
            service_name=config.provider.value, cause=e,
        ) from e

    if not isinstance(data, dict):
        raise ExternalServiceError(
            f"Unexpected response body from {config.provider.value}",
            service_name=config.provider.value,
        )
    return data


def _token_usage(raw: Any) -> Optional[TokenUsage]:
    # usage is informational; a malformed block is dropped rather than failing the call
    if not isinstance(raw, dict):
        return None
    fields = {k: v for k, v in raw.items() if k in TokenUsage.model_fields and v is not None}
    try:
        return TokenUsage(**fields)
    except ValidationError:
        logger.debug(f"Ignoring malformed token usage: {raw}")
        return None


def _chat_completion(prompt: str, config: ProviderConfig) -> ProviderResponse:
    data = _post(
        CHAT_COMPLETION_URLS[config.provider],
        config,
        headers={
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
        },
        json={
            "model": config.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
        },
    )
    choices = data.get("choices") or [{}]
    first = choices[0] if isinstance(choices, list) and isinstance(choices[0], dict) else {}
    message = first.get("message")
    text = message.get("content") if isinstance(message, dict) else None
    return ProviderResponse(text=text if isinstance(text, str) else "", usage=_token_usage(data.get("usage")))


def _ollama_generate(prompt: str, config: ProviderConfig) -> ProviderResponse:
    base_url = config.base_url or "http://localhost:11434"
    data = _post(
        f"{base_url}/api/generate",
        config,
        json={
            "model": config.model,
            "prompt": prompt,
            "system": SYSTEM_PROMPT,
            "options": {"temperature": config.temperature, "num_predict": config.max_tokens},
            "stream": False,
        },
    )
    text = data.get("response")
    usage = _token_usage({
        "prompt_tokens": data.get("prompt_eval_count"),
        "completion_tokens": data.get("eval_count"),
    })
    if usage is not None:
        usage.total_tokens = usage.prompt_tokens + usage.completion_tokens
    return ProviderResponse(text=text if isinstance(text, str) else "", usage=usage)


def generate_text(prompt: str, config: ProviderConfig) -> ProviderResponse:
    """Send one prompt to the configured provider and return its raw text."""
    logger.debug(f"Generating with {config.provider.value}/{config.model} ({len(prompt)} chars)")
    if config.provider == ProviderName.OLLAMA:
        return _ollama_generate(prompt, config)
    return _chat_completion(prompt, config)


@retry_with_logging(max_attempts=3, backoff_factor=1.0, exceptions=(ExternalServiceError,), logger=logger)
def generate_with_retry(prompt: str, config: ProviderConfig) -> ProviderResponse:
    return generate_text(prompt, config)


def check_provider(config: ProviderConfig) -> bool:
    try:
        result = generate_text(
            'Hello, this is a test message. Please respond with "Test successful".',
            config.model_copy(update={"max_tokens": 20}),
        )
    except ExternalServiceError as e:
        logger.warning(f"Provider test failed ({config.provider.value}): {e.message}")
        return False
    return len(result.text) > 0
