"""
HTTP transport adapter for the Loph message handler.

Architectural role:
- Accept inbound chat messages from an external transport bridge.
- Delegate gating, classification and orchestration to `MessageHandler`.
- Return the ordered list of text replies the bridge must deliver.

Serving:
- `uvicorn --factory loph.api.http_api:create_app`

Endpoint responsibilities:
- `POST /v1/messages`: validate `{senderId, text, isGroupMessage}` and return
  `{"replies": [...]}` (empty for ignored/inactive messages).
- `GET /v1/providers`: expose the configured fallback chain for operators.

Input validation behavior:
- Payload shape is enforced by pydantic; invalid bodies get FastAPI's 422.

Error handling strategy:
- `MessageHandler.handle` never raises for orchestration failures, so every
  valid request receives a 200 with replies.
"""

from fastapi import FastAPI
from pydantic import BaseModel, ConfigDict, Field

from loph.bot.handler import InboundMessage, MessageHandler, build_handler


# ============================================================
# Request / Response Schema
# ============================================================

class InboundMessagePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sender_id: str = Field(alias="senderId", min_length=1)
    text: str
    is_group_message: bool = Field(default=False, alias="isGroupMessage")


class RepliesResponse(BaseModel):
    replies: list[str]


# ============================================================
# App Factory
# ============================================================

def create_app(handler: MessageHandler | None = None) -> FastAPI:
    """Build the FastAPI app around `handler` (default: environment-wired)."""
    message_handler = handler or build_handler()
    app = FastAPI(title="Loph")

    @app.post("/v1/messages", response_model=RepliesResponse)
    async def receive_message(payload: InboundMessagePayload):
        replies = await message_handler.handle(
            InboundMessage(
                sender_id=payload.sender_id,
                text=payload.text,
                is_group_message=payload.is_group_message,
            )
        )
        return {"replies": replies}

    @app.get("/v1/providers")
    def list_providers():
        return {
            "object": "list",
            "active_users": message_handler.gate.active_count(),
            "data": [
                {
                    "name": descriptor.name,
                    "timeout_ms": descriptor.timeout_ms,
                    "order": descriptor.order,
                }
                for descriptor in message_handler.orchestrator.providers
            ],
        }

    return app
