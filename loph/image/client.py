"""HuggingFace Inference clients for image generation and image captioning.

Processing flow:
    - Generation: POST the prompt to Stable Diffusion, receive PNG bytes, write them
      to `IMAGE_OUTPUT_DIR`, return the file path.
    - Reading: strip an optional `data:image/...;base64,` header, decode the
      Base64 payload and POST the raw bytes to BLIP, return the caption text.

Error handling strategy:
    - Missing key, HTTP failures and malformed payloads raise `ProviderError`.
    - Base64 decoding failures raise `ProviderError` as well.

Security considerations:
    - Error messages carry at most a truncated slice of the provider body.
"""

import os
import re
import time
import base64
import binascii

import requests

from loph.core.errors import ProviderError
from loph.llm.client import send_request
from loph.llm.provider_config import (
    HUGGINGFACE_CAPTION_URL,
    HUGGINGFACE_IMAGE_URL,
    HUGGINGFACE_KEY_FILE,
    IMAGE_OUTPUT_DIR,
    load_key,
)


DATA_URL_HEADER = re.compile(r"^data:image/\w+;base64,")

NO_CAPTION = "Sem legenda para a imagem."


def _auth_headers(provider_name: str) -> dict:
    api_key = load_key(HUGGINGFACE_KEY_FILE)
    if not api_key:
        raise ProviderError(provider_name, "KEY NOT FOUND")
    return {"Authorization": f"Bearer {api_key}"}


def decode_base64_image(payload: str) -> bytes:
    """Decode a raw or data-URL Base64 image into bytes."""
    cleaned = DATA_URL_HEADER.sub("", payload.strip())
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as err:
        raise ProviderError("image_reading", "INVALID BASE64 IMAGE") from err


def send_generation_request(prompt: str, timeout_ms: int, output_dir: str = IMAGE_OUTPUT_DIR) -> str:
    """Generate an image for `prompt` and return the written PNG path."""
    provider_name = "stable_diffusion"
    headers = _auth_headers(provider_name)
    headers["Content-Type"] = "application/json"

    response = send_request(
        provider_name,
        HUGGINGFACE_IMAGE_URL,
        timeout_ms,
        json={"inputs": prompt},
        headers=headers,
    )
    if not response.content:
        raise ProviderError(provider_name, "EMPTY IMAGE RESPONSE")

    os.makedirs(output_dir, exist_ok=True)
    output_path = os.path.join(output_dir, f"generated_{int(time.time() * 1000)}.png")
    with open(output_path, "wb") as f:
        f.write(response.content)
    return output_path


def send_caption_request(image_bytes: bytes, timeout_ms: int) -> str:
    """Caption raw image bytes with BLIP and return the text."""
    provider_name = "blip"
    headers = _auth_headers(provider_name)
    headers["Content-Type"] = "image/jpeg"

    response = send_request(
        provider_name,
        HUGGINGFACE_CAPTION_URL,
        timeout_ms,
        data=image_bytes,
        headers=headers,
    )
    try:
        data = response.json()
    except ValueError as err:
        raise ProviderError(provider_name, "INVALID JSON RESPONSE") from err

    if not isinstance(data, list) or not data or not isinstance(data[0], dict):
        raise ProviderError(provider_name, "MALFORMED RESPONSE")
    return data[0].get("generated_text") or NO_CAPTION
