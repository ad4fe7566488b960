# swiftloan/services/request_composer.py
from typing import Iterable, List, Optional, Tuple

from swiftloan.agents.personas import HANDOFF_SCRIPT, persona_for
from swiftloan.agents.tools import get_loan_tools
from swiftloan.core.config import settings
from swiftloan.models.domain_models import (
    Attachment, ContentEntry, ContentPart, DialogueTurn, InlineData, ModelRequest,
    SessionState, TurnRole,
)

DEFAULT_MIME_TYPE = "image/jpeg"


def split_data_uri(data: str) -> Tuple[Optional[str], str]:
    """
    Strip a `data:<mime>;base64,` wrapper.
    Returns (mime type found in the prefix or None, bare base64 payload).
    """
    if not data.startswith("data:") or "," not in data:
        return None, data
    header, payload = data.split(",", 1)
    mime = header[len("data:"):].split(";", 1)[0] or None
    return mime, payload


def encode_attachment(attachment: Attachment) -> InlineData:
    prefix_mime, payload = split_data_uri(attachment.data)
    mime = attachment.mime_type or prefix_mime or DEFAULT_MIME_TYPE
    return InlineData(mime_type=mime, data=payload)


def build_system_instruction(state: SessionState) -> str:
    persona = persona_for(state.active_agent)
    record = state.record

    context_lines = [
        f"Active agent: {state.active_agent.value}",
        f"Application status: {record.status.value}",
    ]
    if record.applicant_name:
        context_lines.append(f"Applicant name: {record.applicant_name}")
    if state.pending_upload is not None:
        context_lines.append(f"Outstanding document request: {state.pending_upload.value}")

    tool_lines = [f"- {t['name']}: {t['description']}" for t in get_loan_tools()]

    return (
        'You are the "Master Orchestrator" for SwiftLoan NBFC, an agentic AI loan processing system.\n'
        "You manage a team of virtual workers: Sales Agent, KYC Agent, Underwriting Agent, and Sanction Authority.\n"
        "Your goal is to guide the user from their first message to a generated Sanction Letter.\n\n"
        f"{persona.brief}\n\n"
        "CURRENT CONTEXT:\n" + "\n".join(context_lines) + "\n\n"
        f"{HANDOFF_SCRIPT}\n\n"
        "TOOLS:\n" + "\n".join(tool_lines) + "\n\n"
        "Maintain the persona of the current active agent.\n"
        "Keep responses concise and chatty (mobile-first experience).\n"
        "If the user uploads an image, analyze it. For ID cards, verify the name. For salary slips, verify income."
    )


def turn_to_content(turn: DialogueTurn) -> ContentEntry:
    parts = [ContentPart(text=turn.content)]
    if turn.attachment is not None:
        parts.append(ContentPart(inline_data=encode_attachment(turn.attachment)))
    role = "model" if turn.role == TurnRole.ASSISTANT else "user"
    return ContentEntry(role=role, parts=parts)


def compose_request(turns: Iterable[DialogueTurn], state: SessionState) -> ModelRequest:
    """Build the Gemini request for the next turn from the full dialogue and current state."""
    contents: List[ContentEntry] = [
        turn_to_content(t) for t in turns if t.role != TurnRole.SYSTEM
    ]
    return ModelRequest(
        system_instruction=build_system_instruction(state),
        contents=contents,
        tools=get_loan_tools(),
        temperature=settings.MODEL_TEMPERATURE,
    )
