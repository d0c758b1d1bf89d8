"""Core request orchestration: intent dispatch and the cascading provider chain.

Architectural role:
    Provides the execution pipeline used by transport adapters (HTTP/CLI bot
    handler) to turn one user prompt into an `OrchestrationResult`, recording
    successful interactions in the ephemeral memory store.

Control-flow model:
    1. Classify the prompt (`loph.nlp.intent_router.classify`).
    2. Arithmetic: evaluate locally, never touching a provider.
    3. Image generation/reading: call the single dedicated descriptor.
    4. Technical/general: rewrite, then walk the provider chain in `order`,
       strictly one attempt at a time, each raced against its own deadline.

Concurrency:
    The only suspension points are provider calls. Sync adapters run through
    `asyncio.to_thread`; on timeout the orchestrator stops waiting immediately and
    the abandoned thread's eventual result is dropped. Memory is written only on
    the winning path, after the awaited attempt returned inside this coroutine.

Error handling strategy:
    - Arithmetic failures become the fixed invalid-expression reply.
    - Chain failures are logged and skipped; only exhaustion raises
      `AggregateFailureError`, and nothing is recorded for that request.
    - Image failures raise `ImageGenerationError` / `ImageReadingError` at once.
"""

import asyncio
import inspect
import logging

from loph.core.errors import (
    AggregateFailureError,
    EvaluationError,
    ImageGenerationError,
    ImageReadingError,
    ProviderError,
    ProviderTimeoutError,
)
from loph.core.routing_types import (
    Intent,
    OrchestrationResult,
    ProviderAttempt,
    ProviderDescriptor,
)
from loph.image.service import extract_image_payload
from loph.memory.ephemeral_memory import EphemeralMemoryStore
from loph.nlp.calculator import INVALID_EXPRESSION_MESSAGE, evaluate_expression
from loph.nlp.intent_router import classify, rewrite_prompt


logger = logging.getLogger(__name__)

DOCUMENTATION_PROMPT = (
    "Leia o seguinte texto técnico e explique de forma simples em português:\n\n{text}"
)
MISSING_IMAGE_MESSAGE = "Nenhuma imagem fornecida para leitura."


def _is_async_callable(func) -> bool:
    # adapter instances expose their coroutine through __call__
    target = func if inspect.isroutine(func) else type(func).__call__
    return inspect.iscoroutinefunction(target)


async def _call_provider(descriptor: ProviderDescriptor, prompt: str, context) -> str:
    if _is_async_callable(descriptor.invoke):
        return await descriptor.invoke(prompt, context)
    return await asyncio.to_thread(descriptor.invoke, prompt, context)


async def attempt_provider(descriptor: ProviderDescriptor, prompt: str, context=()) -> str:
    """Run one provider call under its deadline and validate the text it returns.

    Raises:
        ProviderTimeoutError: the deadline expired first.
        ProviderError: the adapter failed or returned blank/non-text output.
    """
    try:
        result = await asyncio.wait_for(
            _call_provider(descriptor, prompt, context),
            timeout=descriptor.timeout_ms / 1000.0,
        )
    except asyncio.TimeoutError as err:
        raise ProviderTimeoutError(descriptor.name, descriptor.timeout_ms) from err
    except ProviderError:
        raise
    except Exception as err:
        raise ProviderError(descriptor.name, f"{type(err).__name__}: {err}") from err

    if not isinstance(result, str) or not result.strip():
        raise ProviderError(descriptor.name, "EMPTY RESPONSE")
    return result


class FallbackOrchestrator:
    """Resolve prompts through local handling, dedicated image slots or the chain.

    Args:
        providers: General-purpose chain; sorted by `order` once, at construction.
        memory: Store that receives successful interactions.
        image_generation: Dedicated descriptor for image-generation prompts.
        image_reading: Dedicated descriptor for image-reading prompts.
        evaluator: Arithmetic evaluator raising `EvaluationError` on bad input.
    """

    def __init__(
        self,
        providers,
        memory: EphemeralMemoryStore,
        image_generation: ProviderDescriptor | None = None,
        image_reading: ProviderDescriptor | None = None,
        evaluator=evaluate_expression,
    ):
        self.providers = tuple(sorted(providers, key=lambda d: d.order))
        self.memory = memory
        self.image_generation = image_generation
        self.image_reading = image_reading
        self.evaluator = evaluator

    async def resolve(self, prompt: str, user_id: str) -> OrchestrationResult:
        intent = classify(prompt)
        logger.debug("Classified prompt for %s as %s", user_id, intent.value)

        if intent is Intent.ARITHMETIC:
            return self._resolve_arithmetic(prompt, user_id)

        if intent is Intent.IMAGE_GENERATION:
            return await self._resolve_image_generation(prompt, user_id)

        if intent is Intent.IMAGE_READING:
            return await self._resolve_image_reading(prompt, user_id)

        return await self._resolve_with_chain(
            prompt,
            user_id,
            rewrite_prompt(prompt, intent),
            intent,
        )

    async def resolve_documentation(self, text: str, user_id: str) -> OrchestrationResult:
        """Explain extracted document text through the general provider chain."""
        prompt = DOCUMENTATION_PROMPT.format(text=text)
        result = await self._resolve_with_chain(prompt, user_id, prompt, Intent.TECHNICAL)
        result.metadata["documentation"] = True
        return result

    # -----------------------------------------------------
    # Local arithmetic
    # -----------------------------------------------------

    def _resolve_arithmetic(self, prompt: str, user_id: str) -> OrchestrationResult:
        try:
            response = self.evaluator(prompt)
        except EvaluationError as err:
            logger.info("Invalid arithmetic expression %r: %s", prompt, err)
            response = INVALID_EXPRESSION_MESSAGE

        self.memory.record(user_id, prompt, response)
        return OrchestrationResult(
            final_response=response,
            metadata={"math": True, "intent": Intent.ARITHMETIC.value},
        )

    # -----------------------------------------------------
    # Dedicated image capabilities (no fallback)
    # -----------------------------------------------------

    async def _resolve_image_generation(self, prompt: str, user_id: str) -> OrchestrationResult:
        if self.image_generation is None:
            raise ImageGenerationError("Image generation is not configured")

        try:
            response = await attempt_provider(
                self.image_generation,
                prompt,
                self.memory.recent(user_id),
            )
        except ProviderError as err:
            logger.error("Image generation failed: %s", err)
            raise ImageGenerationError(f"Erro ao gerar imagem: {err}") from err

        logger.info("Image generated by %s", self.image_generation.name)
        self.memory.record(user_id, prompt, response)
        return OrchestrationResult(
            final_response=response,
            metadata={"imageGeneration": True, "intent": Intent.IMAGE_GENERATION.value},
        )

    async def _resolve_image_reading(self, prompt: str, user_id: str) -> OrchestrationResult:
        if self.image_reading is None:
            raise ImageReadingError("Image reading is not configured")

        image_payload = extract_image_payload(prompt)
        if image_payload is None:
            raise ImageReadingError(MISSING_IMAGE_MESSAGE)

        try:
            response = await attempt_provider(
                self.image_reading,
                image_payload,
                self.memory.recent(user_id),
            )
        except ProviderError as err:
            logger.error("Image reading failed: %s", err)
            raise ImageReadingError(f"Erro ao ler imagem: {err}") from err

        logger.info("Image read by %s", self.image_reading.name)
        self.memory.record(user_id, prompt, response)
        return OrchestrationResult(
            final_response=response,
            metadata={"imageReading": True, "intent": Intent.IMAGE_READING.value},
        )

    # -----------------------------------------------------
    # General-purpose fallback chain
    # -----------------------------------------------------

    async def _resolve_with_chain(
        self,
        original_prompt: str,
        user_id: str,
        provider_prompt: str,
        intent: Intent,
    ) -> OrchestrationResult:
        context = self.memory.recent(user_id)
        attempts = []

        for descriptor in self.providers:
            try:
                response = await attempt_provider(descriptor, provider_prompt, context)
            except ProviderError as err:
                logger.warning("Provider %s failed: %s", descriptor.name, err.message)
                attempts.append(ProviderAttempt(name=descriptor.name, error=err.message))
                continue

            logger.info("Response obtained from %s", descriptor.name)
            self.memory.record(user_id, original_prompt, response)
            return OrchestrationResult(
                final_response=response,
                metadata={"respondedModel": descriptor.name, "intent": intent.value},
            )

        logger.error(
            "All providers failed for %s: %s",
            user_id,
            "; ".join(f"{a.name}: {a.error}" for a in attempts) or "no providers configured",
        )
        raise AggregateFailureError(attempts)
