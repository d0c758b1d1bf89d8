"""Provider/runtime configuration for the LLM and image layers.

Architectural role:
    Centralizes the fallback chain order, per-provider timeouts, endpoints, memory
    window settings and credential lookup for `loph.llm.service`,
    `loph.llm.client` and `loph.image`.

Determinism:
    Values are resolved once at import time from the process environment (after
    `.env` loading). There is no runtime reconfiguration; key files are read lazily
    by `load_key`.

Failure behavior:
    Missing key material is represented as `None`; adapters convert it into a
    `ProviderError` so the chain can move on.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _int_env(name, default):
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


# Ordered general-purpose chain. `ollama:<model>` entries target the local server.
DEFAULT_PROVIDER_CHAIN = (
    "openrouter,"
    "huggingface,"
    "ollama:llama3,"
    "ollama:mistral,"
    "ollama:gemma,"
    "ollama:dolphin-mistral,"
    "ollama:codellama"
)

PROVIDER_CHAIN = [
    name.strip()
    for name in os.getenv("PROVIDER_CHAIN", DEFAULT_PROVIDER_CHAIN).split(",")
    if name.strip()
]

# Per-attempt deadlines in milliseconds.
OPENROUTER_TIMEOUT_MS = _int_env("OPENROUTER_TIMEOUT_MS", 10_000)
HUGGINGFACE_TIMEOUT_MS = _int_env("HUGGINGFACE_TIMEOUT_MS", 5_000)
OLLAMA_TIMEOUT_MS = _int_env("OLLAMA_TIMEOUT_MS", 5_000)
IMAGE_GENERATION_TIMEOUT_MS = _int_env("IMAGE_GENERATION_TIMEOUT_MS", 10_000)
IMAGE_READING_TIMEOUT_MS = _int_env("IMAGE_READING_TIMEOUT_MS", 5_000)

# Ephemeral memory window.
MEMORY_TTL_MS = _int_env("MEMORY_TTL_MS", 60_000)
MEMORY_WARN_THRESHOLD = _int_env("MEMORY_WARN_THRESHOLD", 500)

# Endpoints.
OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
OPENROUTER_MODEL = os.getenv("OPENROUTER_MODEL", "mistralai/mixtral-8x7b-instruct")

HUGGINGFACE_TEXT_URL = "https://api-inference.huggingface.co/models/bigscience/bloom"
HUGGINGFACE_CAPTION_URL = (
    "https://api-inference.huggingface.co/models/Salesforce/blip-image-captioning-base"
)
HUGGINGFACE_IMAGE_URL = (
    "https://api-inference.huggingface.co/models/runwayml/stable-diffusion-v1-5"
)

OLLAMA_URL = os.getenv("OLLAMA_URL", "http://localhost:11434/api/generate")

IMAGE_OUTPUT_DIR = os.getenv("IMAGE_OUTPUT_DIR", ".")

# Key files; `load_key` prefers the `<STEM>_API_KEY` environment variable.
OPENROUTER_KEY_FILE = "config/openrouter.key"
HUGGINGFACE_KEY_FILE = "config/huggingface.key"


# Instructions wrapped around the user prompt by each adapter.
OPENROUTER_SYSTEM_MESSAGE = (
    "Responda de forma natural, clara e completa em português brasileiro."
)
HUGGINGFACE_PROMPT_PREFIX = "Responda de forma clara e completa: "
OLLAMA_PROMPT_PREFIX = "Responda de forma clara e em português brasileiro:\n"


def load_key(path):
    """Load API key from environment override or key file.

    Resolution order:
        1. Environment variable inferred from file stem (for example
           `config/openrouter.key` -> `OPENROUTER_API_KEY`).
        2. Raw file contents at `path`.

    Edge cases:
        - `None` path returns `None`.
        - Missing file returns `None`.
    """
    if not path:
        return None
    key_name = os.path.splitext(os.path.basename(path))[0].upper() + "_API_KEY"
    env_value = os.getenv(key_name)
    if env_value:
        return env_value
    if not os.path.exists(path):
        return None
    with open(path, "r") as f:
        return f.read().strip()
