# swiftloan/services/chat_service.py
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from swiftloan.agents.personas import CONTINUATION_NOTICE, greeting_for
from swiftloan.core.config import settings
from swiftloan.core.session import LoanSession
from swiftloan.models.domain_models import (
    Attachment, DialogueTurn, ModelRequest, ModelResponse, SessionState, TurnRole,
)
from swiftloan.services.gemini_client import GeminiClient
from swiftloan.services.request_composer import compose_request
from swiftloan.services.tool_interpreter import interpret_tool_calls
from swiftloan.services.upload_gate import UploadGate

logger = logging.getLogger(__name__)

# model text shorter than this after a tool batch is replaced by a canned line
MIN_MODEL_TEXT_LENGTH = 10

SYSTEM_ERROR_MESSAGE = (
    "System Error: Unable to reach the agent network. Please ensure your API key is valid."
)


class ModelClient(Protocol):
    async def generate(self, request: ModelRequest) -> ModelResponse:
        ...


@dataclass
class TurnOutcome:
    accepted: bool
    user_turn: Optional[DialogueTurn] = None
    assistant_turn: Optional[DialogueTurn] = None
    error_turn: Optional[DialogueTurn] = None


def reconcile_text(
    model_text: str,
    tools_ran: bool,
    before: SessionState,
    after: SessionState,
    gate: UploadGate,
) -> str:
    """Pick the text to show for this turn; an empty result means no assistant turn."""
    text = (model_text or "").strip()
    if not tools_ran or len(text) >= MIN_MODEL_TEXT_LENGTH:
        return text
    if after.active_agent != before.active_agent:
        return greeting_for(after.active_agent)
    if after.pending_upload is not None:
        return gate.prompt_for(after.pending_upload)
    return CONTINUATION_NOTICE


class TurnOrchestrator:
    def __init__(self, model_client: Optional[ModelClient] = None, gate: Optional[UploadGate] = None):
        self.model_client = model_client or GeminiClient()
        self.gate = gate or UploadGate(clear_on_any_turn=settings.CLEAR_UPLOAD_ON_ANY_TURN)

    async def handle_user_message(
        self,
        session: LoanSession,
        text: str,
        attachment: Optional[Attachment] = None,
    ) -> TurnOutcome:
        text = text or ""
        if (not text.strip() and attachment is None) or session.busy:
            return TurnOutcome(accepted=False)

        # set before the first await so a second submission sees it
        session.busy = True
        try:
            user_turn = session.log.add(TurnRole.USER, text, attachment=attachment)
            session.state = self.gate.on_user_turn(session.state, has_attachment=attachment is not None)
            before = session.state

            try:
                request = compose_request(session.log.replayable(), before)
                response = await self.model_client.generate(request)
            except Exception:
                logger.exception("turn failed for session %s", session.id)
                error_turn = session.log.add(TurnRole.SYSTEM, SYSTEM_ERROR_MESSAGE)
                return TurnOutcome(accepted=True, user_turn=user_turn, error_turn=error_turn)

            result = interpret_tool_calls(response.tool_calls, before)
            after = result.state
            if result.applied or result.skipped:
                logger.info(
                    "session %s tools applied=%s skipped=%s agent=%s status=%s",
                    session.id, result.applied, result.skipped,
                    after.active_agent.value, after.record.status.value,
                )

            reply = reconcile_text(response.text, bool(response.tool_calls), before, after, self.gate)
            assistant_turn = None
            if reply:
                assistant_turn = session.log.add(TurnRole.ASSISTANT, reply, sender=after.active_agent.value)

            session.state = after
            return TurnOutcome(accepted=True, user_turn=user_turn, assistant_turn=assistant_turn)
        finally:
            session.busy = False
