from __future__ import annotations

import asyncio
import threading
import time

import pytest

from conftest import FakeProvider
from loph.core.engine import FallbackOrchestrator, attempt_provider
from loph.core.errors import (
    AggregateFailureError,
    ImageGenerationError,
    ImageReadingError,
    ProviderError,
    ProviderTimeoutError,
)
from loph.core.routing_types import ProviderDescriptor
from loph.nlp.calculator import INVALID_EXPRESSION_MESSAGE
from loph.nlp.intent_router import TECHNICAL_PREFIX


def test_arithmetic_never_calls_providers(make_orchestrator, memory):
    a = FakeProvider("A", reply="should not be used")
    orchestrator = make_orchestrator([a])

    result = asyncio.run(orchestrator.resolve("2+2*3", "u1"))

    assert result.final_response == "8"
    assert result.metadata["math"] is True
    assert a.calls == []
    assert [(e.prompt, e.response) for e in memory.recent("u1")] == [("2+2*3", "8")]


def test_invalid_arithmetic_is_terminal(make_orchestrator, memory):
    a = FakeProvider("A", reply="nope")
    orchestrator = make_orchestrator([a])

    result = asyncio.run(orchestrator.resolve("1/0", "u1"))

    assert result.final_response == INVALID_EXPRESSION_MESSAGE
    assert a.calls == []
    assert memory.recent("u1")[0].response == INVALID_EXPRESSION_MESSAGE


def test_first_success_wins_in_order(make_orchestrator, memory):
    a = FakeProvider("A")
    b = FakeProvider("B", reply="resposta de B")
    c = FakeProvider("C", reply="resposta de C")
    orchestrator = make_orchestrator([a, b, c])

    result = asyncio.run(orchestrator.resolve("Qual a capital da França?", "u1"))

    assert result.final_response == "resposta de B"
    assert result.metadata["respondedModel"] == "B"
    assert len(a.calls) == 1
    assert len(b.calls) == 1
    assert c.calls == []
    assert [(e.prompt, e.response) for e in memory.recent("u1")] == [
        ("Qual a capital da França?", "resposta de B")
    ]


def test_descriptors_are_sorted_by_order(memory):
    first = FakeProvider("first", reply="1")
    second = FakeProvider("second", reply="2")
    orchestrator = FallbackOrchestrator(
        providers=[second.descriptor(order=5), first.descriptor(order=1)],
        memory=memory,
    )

    result = asyncio.run(orchestrator.resolve("oi", "u1"))

    assert result.metadata["respondedModel"] == "first"
    assert second.calls == []


def test_hung_provider_times_out_and_chain_continues(memory):
    slow = FakeProvider("slow", hang=True)
    fast = FakeProvider("fast", reply="ok")
    orchestrator = FallbackOrchestrator(
        providers=[slow.descriptor(order=0, timeout_ms=50), fast.descriptor(order=1)],
        memory=memory,
    )

    started = time.monotonic()
    result = asyncio.run(orchestrator.resolve("oi", "u1"))
    elapsed = time.monotonic() - started

    assert result.metadata["respondedModel"] == "fast"
    assert len(slow.calls) == 1
    assert elapsed < 2


def test_blocking_sync_provider_does_not_stall_chain(memory):
    release = threading.Event()
    late_results = []

    def blocking(prompt, context):
        release.wait(5)
        late_results.append("late")
        return "late answer"

    fast = FakeProvider("fast", reply="ok")
    orchestrator = FallbackOrchestrator(
        providers=[
            ProviderDescriptor("blocking", blocking, timeout_ms=50, order=0),
            fast.descriptor(order=1),
        ],
        memory=memory,
    )

    async def scenario():
        started = time.monotonic()
        result = await orchestrator.resolve("oi", "u1")
        elapsed = time.monotonic() - started
        release.set()
        return result, elapsed

    result, elapsed = asyncio.run(scenario())

    assert result.final_response == "ok"
    assert elapsed < 2
    assert late_results == ["late"]
    # the abandoned call finished but never reached memory
    assert [e.response for e in memory.recent("u1")] == ["ok"]


def test_all_providers_failing_raises_and_leaves_memory_untouched(make_orchestrator, memory):
    a = FakeProvider("A")
    b = FakeProvider("B")
    orchestrator = make_orchestrator([a, b])

    with pytest.raises(AggregateFailureError) as excinfo:
        asyncio.run(orchestrator.resolve("Olá", "u1"))

    assert [attempt.name for attempt in excinfo.value.attempts] == ["A", "B"]
    assert memory.recent("u1") == []


def test_empty_chain_raises_aggregate_failure(make_orchestrator):
    orchestrator = make_orchestrator([])
    with pytest.raises(AggregateFailureError):
        asyncio.run(orchestrator.resolve("Olá", "u1"))


def test_blank_provider_output_counts_as_failure(make_orchestrator):
    blank = FakeProvider("blank", reply="   ")
    good = FakeProvider("good", reply="answer")
    orchestrator = make_orchestrator([blank, good])

    result = asyncio.run(orchestrator.resolve("Olá", "u1"))

    assert result.metadata["respondedModel"] == "good"


def test_unexpected_adapter_exception_is_a_provider_failure(memory):
    def broken(prompt, context):
        raise KeyError("choices")

    good = FakeProvider("good", reply="answer")
    orchestrator = FallbackOrchestrator(
        providers=[ProviderDescriptor("broken", broken, 1000, 0), good.descriptor(order=1)],
        memory=memory,
    )

    result = asyncio.run(orchestrator.resolve("Olá", "u1"))

    assert result.final_response == "answer"


def test_technical_prompt_is_rewritten_but_memory_keeps_original(make_orchestrator, memory):
    a = FakeProvider("A", reply="explicação")
    orchestrator = make_orchestrator([a])

    asyncio.run(orchestrator.resolve("o que é física quântica?", "u1"))

    assert a.calls[0][0] == f"{TECHNICAL_PREFIX}o que é física quântica?"
    assert memory.recent("u1")[0].prompt == "o que é física quântica?"


def test_recent_memory_is_passed_as_context(make_orchestrator):
    a = FakeProvider("A", reply="resposta")
    orchestrator = make_orchestrator([a])

    asyncio.run(orchestrator.resolve("primeira", "u1"))
    asyncio.run(orchestrator.resolve("segunda", "u1"))

    assert a.calls[0][1] == []
    assert [e.prompt for e in a.calls[1][1]] == ["primeira"]


def test_image_generation_uses_only_dedicated_adapter(make_orchestrator, memory):
    chain = FakeProvider("chain", reply="texto")
    generator = FakeProvider("sd", reply="Imagem gerada: ./generated_1.png")
    orchestrator = make_orchestrator([chain], image_generation=generator)

    result = asyncio.run(orchestrator.resolve("gerar imagem de um gato", "u1"))

    assert result.final_response == "Imagem gerada: ./generated_1.png"
    assert result.metadata["imageGeneration"] is True
    assert [call[0] for call in generator.calls] == ["gerar imagem de um gato"]
    assert chain.calls == []
    assert len(memory.recent("u1")) == 1


def test_image_generation_failure_does_not_fall_back(make_orchestrator, memory):
    chain = FakeProvider("chain", reply="texto")
    generator = FakeProvider("sd")
    orchestrator = make_orchestrator([chain], image_generation=generator)

    with pytest.raises(ImageGenerationError):
        asyncio.run(orchestrator.resolve("criar imagem de um cachorro", "u1"))

    assert chain.calls == []
    assert memory.recent("u1") == []


def test_image_reading_passes_payload_after_colon(make_orchestrator):
    reader = FakeProvider("blip", reply="a cat on a sofa")
    orchestrator = make_orchestrator([], image_reading=reader)

    result = asyncio.run(orchestrator.resolve("ler foto: aGVsbG8=", "u1"))

    assert result.final_response == "a cat on a sofa"
    assert result.metadata["imageReading"] is True
    assert reader.calls[0][0] == "aGVsbG8="


def test_image_reading_without_payload_fails_fast(make_orchestrator):
    reader = FakeProvider("blip", reply="x")
    orchestrator = make_orchestrator([], image_reading=reader)

    with pytest.raises(ImageReadingError):
        asyncio.run(orchestrator.resolve("descrever foto", "u1"))
    assert reader.calls == []


def test_unconfigured_image_capability_raises(make_orchestrator):
    orchestrator = make_orchestrator([FakeProvider("A", reply="x")])
    with pytest.raises(ImageGenerationError):
        asyncio.run(orchestrator.resolve("gerar foto do mar", "u1"))


def test_resolve_documentation_wraps_text(make_orchestrator):
    a = FakeProvider("A", reply="resumo")
    orchestrator = make_orchestrator([a])

    result = asyncio.run(orchestrator.resolve_documentation("Capítulo 1", "u1"))

    assert result.final_response == "resumo"
    assert result.metadata["documentation"] is True
    assert a.calls[0][0].endswith("Capítulo 1")
    assert a.calls[0][0].startswith("Leia o seguinte texto técnico")


def test_attempt_provider_timeout_error_carries_deadline():
    slow = FakeProvider("slow", hang=True)
    with pytest.raises(ProviderTimeoutError) as excinfo:
        asyncio.run(attempt_provider(slow.descriptor(timeout_ms=20), "oi"))
    assert excinfo.value.timeout_ms == 20
    assert isinstance(excinfo.value, ProviderError)


@pytest.mark.parametrize("prompt", ["((9^999)^999)^99", "-" * 100_000 + "1", "1+" * 100_000 + "1"])
def test_hostile_arithmetic_gets_fixed_reply_and_is_recorded(make_orchestrator, memory, prompt):
    a = FakeProvider("A", reply="nope")
    orchestrator = make_orchestrator([a])

    started = time.monotonic()
    result = asyncio.run(orchestrator.resolve(prompt, "u1"))

    assert time.monotonic() - started < 2
    assert result.final_response == INVALID_EXPRESSION_MESSAGE
    assert result.metadata["math"] is True
    assert a.calls == []
    assert memory.recent("u1")[0].response == INVALID_EXPRESSION_MESSAGE


def test_sync_callable_object_runs_off_the_event_loop():
    loop_threads = []

    class SyncAdapter:
        def __call__(self, prompt, context=()):
            loop_threads.append(threading.current_thread())
            return "sync answer"

    descriptor = ProviderDescriptor("sync", SyncAdapter(), 1000, 0)

    assert asyncio.run(attempt_provider(descriptor, "oi")) == "sync answer"
    assert loop_threads[0] is not threading.main_thread()


def test_async_function_is_awaited_directly():
    async def answer(prompt, context=()):
        return f"eco: {prompt}"

    descriptor = ProviderDescriptor("async", answer, 1000, 0)

    assert asyncio.run(attempt_provider(descriptor, "oi")) == "eco: oi"
