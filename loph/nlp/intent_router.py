"""Intent router producing `Intent` values for core orchestration.

Intent classification logic:
- Rules live in `INTENT_RULES`, an ordered table of `(Intent, predicate)` pairs.
- The first matching rule wins; `Intent.GENERAL` is the default.
- Trigger phrases and keywords are Brazilian Portuguese, matching the
  deployment language of the bot.

Interaction with core:
- `classify` output selects the handling path in `loph.core.engine`.
- `rewrite_prompt` is applied before a prompt reaches the general provider chain.

Determinism:
- Pure functions, no I/O, total over every string input.
"""

import re

from loph.core.routing_types import Intent


# Digits, + - * / ^, parentheses, whitespace and decimal points. Empty and
# operator-only strings match on purpose; the evaluator rejects them.
ARITHMETIC_PATTERN = re.compile(r"[-+*/()\d\s^.]*")

IMAGE_GENERATION_TRIGGERS = (
    "gerar foto",
    "criar imagem",
    "gerar imagem",
)

IMAGE_READING_TRIGGERS = (
    "ler foto",
    "descrever foto",
    "legendar foto",
)

TECHNICAL_KEYWORDS = (
    "programa",
    "código",
    "física",
    "matemática",
)

TECHNICAL_PREFIX = "Explique de forma clara e detalhada: "


def is_arithmetic(prompt: str) -> bool:
    return ARITHMETIC_PATTERN.fullmatch(prompt.strip()) is not None


def is_image_generation(prompt: str) -> bool:
    return prompt.lower().startswith(IMAGE_GENERATION_TRIGGERS)


def is_image_reading(prompt: str) -> bool:
    return prompt.lower().startswith(IMAGE_READING_TRIGGERS)


def is_technical(prompt: str) -> bool:
    lowered = prompt.lower()
    return any(keyword in lowered for keyword in TECHNICAL_KEYWORDS)


INTENT_RULES = (
    (Intent.ARITHMETIC, is_arithmetic),
    (Intent.IMAGE_GENERATION, is_image_generation),
    (Intent.IMAGE_READING, is_image_reading),
    (Intent.TECHNICAL, is_technical),
)


def classify(prompt: str) -> Intent:
    """
    Classify a raw prompt into exactly one `Intent`.

    Edge cases:
    - `None` is treated as an empty string and therefore classifies as arithmetic,
      which the calculator reports as an invalid expression.
    - Leading whitespace defeats the prefix triggers; only the arithmetic rule trims.
    """
    text = prompt or ""
    for intent, predicate in INTENT_RULES:
        if predicate(text):
            return intent
    return Intent.GENERAL


def rewrite_prompt(prompt: str, intent: Intent) -> str:
    """Prepend the detailed-explanation instruction for technical prompts."""
    if intent is Intent.TECHNICAL:
        return f"{TECHNICAL_PREFIX}{prompt}"
    return prompt
