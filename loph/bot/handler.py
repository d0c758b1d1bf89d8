"""Transport-facing message handler.

Architectural role:
    Sits between a chat transport (HTTP adapter, CLI) and the orchestration core.
    It owns the pre-orchestration steps and turns every outcome into the list of
    text replies the transport must deliver.

Request lifecycle (per inbound message):
1. Group messages are ignored entirely (no replies).
2. Exact control tokens (`/ativar`, `/desativar`, `/ajuda`) are consumed here.
3. Messages from inactive users are dropped.
4. Active users get a processing acknowledgement followed by the final answer.

Error handling strategy:
    - `SpecializedCapabilityError` -> image-specific apology.
    - `AggregateFailureError` and any unexpected exception -> generic apology.
    - Errors are logged; one failed request never propagates to the transport.
"""

import logging
from dataclasses import dataclass

from loph.bot.constants import COMMANDS, MESSAGES, build_help_text
from loph.core.activation import ActivationGate
from loph.core.engine import FallbackOrchestrator
from loph.core.errors import AggregateFailureError, SpecializedCapabilityError
from loph.image.service import (
    build_image_generation_provider,
    build_image_reading_provider,
)
from loph.llm.provider_config import MEMORY_TTL_MS, MEMORY_WARN_THRESHOLD
from loph.llm.service import build_provider_chain
from loph.memory.ephemeral_memory import EphemeralMemoryStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InboundMessage:
    sender_id: str
    text: str
    is_group_message: bool = False


class MessageHandler:
    def __init__(self, gate: ActivationGate, orchestrator: FallbackOrchestrator):
        self.gate = gate
        self.orchestrator = orchestrator

    def handle_command(self, sender_id: str, text: str):
        """Apply a control token and return its replies, or `None` for normal text."""
        if text == COMMANDS["ACTIVATE"]:
            self.gate.activate(sender_id)
            return [MESSAGES["WELCOME"]]

        if text == COMMANDS["DEACTIVATE"]:
            self.gate.deactivate(sender_id)
            return [MESSAGES["GOODBYE"]]

        if text == COMMANDS["HELP"]:
            return [build_help_text()]

        return None

    async def handle(self, message: InboundMessage) -> list[str]:
        if message.is_group_message:
            return []

        command_replies = self.handle_command(message.sender_id, message.text)
        if command_replies is not None:
            return command_replies

        if not self.gate.is_active(message.sender_id):
            return []

        resolution = self.orchestrator.resolve(message.text, message.sender_id)
        return await self._process(message.sender_id, resolution)

    async def handle_document(self, sender_id: str, text: str) -> list[str]:
        """Explain extracted document text for an active user."""
        if not self.gate.is_active(sender_id):
            return []
        resolution = self.orchestrator.resolve_documentation(text, sender_id)
        return await self._process(sender_id, resolution)

    async def _process(self, sender_id: str, resolution) -> list[str]:
        replies = [MESSAGES["PROCESSING"]]
        try:
            result = await resolution
        except SpecializedCapabilityError:
            logger.exception("Image capability failed for %s", sender_id)
            replies.append(MESSAGES["IMAGE_ERROR"])
        except AggregateFailureError as err:
            logger.error("No provider answered %s (%d attempts)", sender_id, len(err.attempts))
            replies.append(MESSAGES["ERROR"])
        except Exception:
            logger.exception("Unexpected error while processing message from %s", sender_id)
            replies.append(MESSAGES["ERROR"])
        else:
            replies.append(result.final_response)
        return replies


def build_handler() -> MessageHandler:
    """Wire the handler from environment configuration (`loph.llm.provider_config`)."""
    memory = EphemeralMemoryStore(ttl_ms=MEMORY_TTL_MS, warn_threshold=MEMORY_WARN_THRESHOLD)
    orchestrator = FallbackOrchestrator(
        providers=build_provider_chain(),
        memory=memory,
        image_generation=build_image_generation_provider(),
        image_reading=build_image_reading_provider(),
    )
    logger.info(
        "Provider chain: %s",
        ", ".join(d.name for d in orchestrator.providers),
    )
    return MessageHandler(ActivationGate(), orchestrator)
