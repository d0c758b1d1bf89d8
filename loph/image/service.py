"""Image capability dispatchers used by core image intents.

Role in pipeline:
    - `build_image_generation_provider` / `build_image_reading_provider` wrap the
      HuggingFace clients as single `ProviderDescriptor` slots. There is no chain
      behind them.
    - `extract_image_payload` pulls the Base64 payload out of an image-reading
      prompt such as `"ler foto: <base64>"`.

Error handling strategy:
    - Provider exceptions propagate unchanged; the orchestrator converts them into
      `ImageGenerationError` / `ImageReadingError`.
"""

from loph.core.routing_types import ProviderDescriptor
from loph.image.client import (
    decode_base64_image,
    send_caption_request,
    send_generation_request,
)
from loph.llm.provider_config import (
    IMAGE_GENERATION_TIMEOUT_MS,
    IMAGE_READING_TIMEOUT_MS,
)


def extract_image_payload(prompt: str):
    """Return the text after the first `:` of `prompt`, or `None` when blank."""
    _, separator, payload = prompt.partition(":")
    payload = payload.strip()
    if not separator or not payload:
        return None
    return payload


class ImageGenerator:
    def __init__(self, timeout_ms: int = IMAGE_GENERATION_TIMEOUT_MS):
        self.timeout_ms = timeout_ms

    def __call__(self, prompt: str, context=()) -> str:
        output_path = send_generation_request(prompt, self.timeout_ms)
        return f"Imagem gerada: {output_path}"


class ImageReader:
    def __init__(self, timeout_ms: int = IMAGE_READING_TIMEOUT_MS):
        self.timeout_ms = timeout_ms

    def __call__(self, image_payload: str, context=()) -> str:
        return send_caption_request(decode_base64_image(image_payload), self.timeout_ms)


def build_image_generation_provider() -> ProviderDescriptor:
    return ProviderDescriptor(
        name="stable_diffusion",
        invoke=ImageGenerator(),
        timeout_ms=IMAGE_GENERATION_TIMEOUT_MS,
    )


def build_image_reading_provider() -> ProviderDescriptor:
    return ProviderDescriptor(
        name="blip",
        invoke=ImageReader(),
        timeout_ms=IMAGE_READING_TIMEOUT_MS,
    )
