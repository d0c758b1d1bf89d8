"""Provider-specific transport adapters for text generation.

Architectural role:
    Executes HTTP requests against each configured backend and normalizes the
    response into plain text. Every adapter is a callable
    `(prompt, context) -> str` suitable for `ProviderDescriptor.invoke`.

Model invocation flow:
    `FallbackOrchestrator.resolve` -> `ProviderDescriptor.invoke(prompt, context)`
    -> adapter `__call__` -> `requests.post(..., timeout=...)` -> parsed text.

Retry behavior:
    No retry loop is implemented here. Retrying across backends is the fallback
    chain's job; each adapter attempts its call exactly once.

Failure handling model:
    Missing keys, request exceptions, non-2xx statuses and malformed payloads are
    all raised as `ProviderError` with a short, provider-labeled message.
"""

import requests

from loph.core.errors import ProviderError
from loph.llm.provider_config import (
    OPENROUTER_URL,
    OPENROUTER_MODEL,
    OPENROUTER_SYSTEM_MESSAGE,
    OPENROUTER_KEY_FILE,
    HUGGINGFACE_TEXT_URL,
    HUGGINGFACE_KEY_FILE,
    HUGGINGFACE_PROMPT_PREFIX,
    OLLAMA_URL,
    OLLAMA_PROMPT_PREFIX,
    load_key,
)


MAX_ERROR_BODY_CHARS = 200


def _build_sanitized_http_error(provider_name: str, err: requests.exceptions.RequestException) -> ProviderError:
    """Build a provider-labeled error with status code and a truncated body."""
    response = getattr(err, "response", None)
    if response is not None:
        body = (getattr(response, "text", "") or "")[:MAX_ERROR_BODY_CHARS]
        return ProviderError(
            provider_name,
            f"HTTP ERROR ({response.status_code}) {body}".strip(),
        )
    return ProviderError(provider_name, f"REQUEST FAILED ({type(err).__name__})")


def send_request(provider_name: str, url: str, timeout_ms: int, **request_kwargs) -> requests.Response:
    """POST once with a socket timeout and return the 2xx response.

    Raises:
        ProviderError: on any `requests` exception, including non-2xx statuses.
    """
    try:
        response = requests.post(url, timeout=timeout_ms / 1000.0, **request_kwargs)
        response.raise_for_status()
        return response
    except requests.exceptions.RequestException as err:
        raise _build_sanitized_http_error(provider_name, err) from err


def post_json(provider_name: str, url: str, payload: dict, timeout_ms: int, headers=None):
    """POST a JSON payload and return the parsed JSON body."""
    response = send_request(
        provider_name,
        url,
        timeout_ms,
        json=payload,
        headers=headers or {},
    )
    try:
        return response.json()
    except ValueError as err:
        raise ProviderError(provider_name, "INVALID JSON RESPONSE") from err


def _require_key(provider_name: str, key_file: str) -> str:
    api_key = load_key(key_file)
    if not api_key:
        raise ProviderError(provider_name, "KEY NOT FOUND")
    return api_key


class OpenRouterAdapter:
    """OpenAI-compatible chat completion via OpenRouter.

    Recent memory entries are replayed as user/assistant turns before the
    current prompt.
    """

    def __init__(self, timeout_ms: int, model: str = OPENROUTER_MODEL, name: str = "openrouter"):
        self.name = name
        self.model = model
        self.timeout_ms = timeout_ms

    def build_payload(self, prompt: str, context=()) -> dict:
        messages = [{"role": "system", "content": OPENROUTER_SYSTEM_MESSAGE}]
        for entry in context:
            messages.append({"role": "user", "content": entry.prompt})
            messages.append({"role": "assistant", "content": entry.response})
        messages.append({"role": "user", "content": prompt})
        return {"model": self.model, "messages": messages}

    def __call__(self, prompt: str, context=()) -> str:
        api_key = _require_key(self.name, OPENROUTER_KEY_FILE)
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        data = post_json(
            self.name,
            OPENROUTER_URL,
            self.build_payload(prompt, context),
            self.timeout_ms,
            headers=headers,
        )
        try:
            return data["choices"][0]["message"]["content"].strip()
        except (KeyError, IndexError, TypeError, AttributeError) as err:
            raise ProviderError(self.name, "MALFORMED RESPONSE") from err


class HuggingFaceAdapter:
    """Text generation through the HuggingFace Inference API (BLOOM)."""

    EMPTY_OUTPUT = "Sem resposta do HuggingFace."

    def __init__(self, timeout_ms: int, url: str = HUGGINGFACE_TEXT_URL, name: str = "huggingface"):
        self.name = name
        self.url = url
        self.timeout_ms = timeout_ms

    def __call__(self, prompt: str, context=()) -> str:
        api_key = _require_key(self.name, HUGGINGFACE_KEY_FILE)
        data = post_json(
            self.name,
            self.url,
            {"inputs": f"{HUGGINGFACE_PROMPT_PREFIX}{prompt}"},
            self.timeout_ms,
            headers={"Authorization": f"Bearer {api_key}"},
        )
        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            raise ProviderError(self.name, "MALFORMED RESPONSE")
        return data[0].get("generated_text") or self.EMPTY_OUTPUT


class OllamaAdapter:
    """Local model served by Ollama's `/api/generate` endpoint."""

    def __init__(self, model: str, timeout_ms: int, url: str = OLLAMA_URL):
        self.model = model
        self.name = f"ollama_local:{model}"
        self.url = url
        self.timeout_ms = timeout_ms

    def __call__(self, prompt: str, context=()) -> str:
        data = post_json(
            self.name,
            self.url,
            {
                "model": self.model,
                "prompt": f"{OLLAMA_PROMPT_PREFIX}{prompt}",
                "stream": False,
            },
            self.timeout_ms,
        )
        output = data.get("response") if isinstance(data, dict) else None
        if not isinstance(output, str):
            raise ProviderError(self.name, "MALFORMED RESPONSE")
        return output
