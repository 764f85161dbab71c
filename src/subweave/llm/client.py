"""Unified LLM client via LiteLLM with Ollama auto-pull support."""

from __future__ import annotations

from typing import Callable

from subweave.core.config import LLMConfig
from subweave.core.errors import ProviderError
from subweave.utils.console import console

_RETRYABLE_STATUS = {408, 409, 500, 502, 503, 504}
_RETRYABLE_NAMES = {
    "APIConnectionError",
    "Timeout",
    "APITimeoutError",
    "ServiceUnavailableError",
    "InternalServerError",
    "ConnectionError",
}
_QUOTA_HINTS = ("quota", "billing", "insufficient_quota", "credit")


def _extract_ollama_model(model: str) -> str | None:
    """Extract the Ollama model name from a LiteLLM model string.

    Returns None if the model is not served by Ollama.
    E.g. "ollama_chat/qwen3:8b" -> "qwen3:8b"
    """
    for prefix in ("ollama_chat/", "ollama/"):
        if model.startswith(prefix):
            return model[len(prefix) :]
    return None


def ensure_ollama_model(model: str) -> None:
    """Pull the Ollama model if not already available locally.

    No-op if the model is not an Ollama model or if the ollama package
    is not installed.
    """
    model_name = _extract_ollama_model(model)
    if model_name is None:
        return

    try:
        import ollama
    except ImportError:
        return

    try:
        available = {m.model for m in ollama.list().models}
    except Exception:
        return

    if model_name in available or f"{model_name}:latest" in available:
        return

    console.print(f"[bold]Pulling Ollama model:[/bold] {model_name}")
    try:
        ollama.pull(model_name)
        console.print(f"[green]Model ready:[/green] {model_name}")
    except Exception as e:
        console.print(f"[yellow]Failed to pull model {model_name}:[/yellow] {e}")


def unload_ollama_model(model: str) -> None:
    """Unload an Ollama model from GPU memory once a run is over.

    No-op if the model is not an Ollama model.
    """
    model_name = _extract_ollama_model(model)
    if model_name is None:
        return

    try:
        import ollama
    except ImportError:
        return

    try:
        ollama.generate(model=model_name, keep_alive=0)
        console.print(f"[dim]Unloaded Ollama model:[/dim] {model_name}")
    except Exception as e:
        console.print(f"[dim]Could not unload {model_name}: {e}[/dim]")


def _retry_after(exc: Exception) -> float | None:
    headers = getattr(getattr(exc, "response", None), "headers", None)
    if not headers:
        return None
    try:
        return float(headers.get("retry-after"))
    except (TypeError, ValueError):
        return None


def to_provider_error(exc: Exception) -> ProviderError:
    """Classify a LiteLLM/transport exception as retryable or not.

    Rate limits, timeouts, connection failures and 5xx responses are
    retryable; quota exhaustion, auth failures and bad requests are not.
    """
    status = getattr(exc, "status_code", None)
    message = str(exc) or type(exc).__name__

    if status == 429:
        retryable = not any(hint in message.lower() for hint in _QUOTA_HINTS)
    elif isinstance(status, int):
        retryable = status in _RETRYABLE_STATUS
    else:
        retryable = type(exc).__name__ in _RETRYABLE_NAMES or isinstance(exc, OSError)

    return ProviderError(
        message,
        retryable=retryable,
        status_code=status if isinstance(status, int) else None,
        retry_after=_retry_after(exc),
    )


def complete(
    messages: list[dict[str, str]],
    config: LLMConfig,
    **kwargs: object,
) -> str:
    """Send a chat completion request via LiteLLM.

    Auto-pulls Ollama models if not available locally.

    Args:
        messages: Chat messages in OpenAI format.
        config: LLM configuration.
        **kwargs: Additional kwargs passed to litellm.completion.

    Returns:
        The assistant's response text.

    Raises:
        ProviderError: On any provider or transport failure, or an empty reply.
    """
    from litellm import completion

    ensure_ollama_model(config.model)

    try:
        response = completion(
            model=config.model,
            messages=messages,
            api_base=config.api_base,
            api_key=config.api_key,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout=config.timeout,
            **kwargs,
        )
    except Exception as e:
        raise to_provider_error(e) from e

    content = response.choices[0].message.content
    if not content or not content.strip():
        raise ProviderError(
            f"{config.model} returned empty content "
            "(rate limit, content filter or provider issue)",
            retryable=True,
        )
    return content


def token_counter(model: str) -> Callable[[str], int]:
    """Return a function counting tokens of a text for ``model``."""
    from litellm import token_counter as count

    def _count(text: str) -> int:
        return count(model=model, text=text)

    return _count
