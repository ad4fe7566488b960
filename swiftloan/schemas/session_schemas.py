# swiftloan/schemas/session_schemas.py
from pydantic import BaseModel
from typing import Optional, List, Literal

from swiftloan.core.session import LoanSession
from swiftloan.models.domain_models import (
    ApplicationRecord, Attachment, DialogueTurn, DocumentType, LoanStatus,
)
from swiftloan.services.upload_gate import UploadGate


class AttachmentIn(BaseModel):
    data: str
    mime_type: Optional[str] = None
    url: Optional[str] = None

    def to_attachment(self) -> Attachment:
        return Attachment(data=self.data, mime_type=self.mime_type, url=self.url)


class ChatMessageIn(BaseModel):
    text: str = ""
    attachment: Optional[AttachmentIn] = None


class WorkflowStep(BaseModel):
    label: str
    status: Literal["completed", "pending"]


class SessionSummary(BaseModel):
    session_id: str
    active_agent: str
    status_message: str
    pending_upload: Optional[DocumentType] = None
    input_hint: Optional[str] = None
    busy: bool
    application: ApplicationRecord
    steps: List[WorkflowStep]


class MessagesOut(BaseModel):
    messages: List[DialogueTurn]


class ChatResponse(BaseModel):
    session_id: str
    accepted: bool
    reply: Optional[DialogueTurn] = None
    error: Optional[DialogueTurn] = None
    session: SessionSummary


def workflow_steps(status: LoanStatus) -> List[WorkflowStep]:
    def step(label: str, done: bool) -> WorkflowStep:
        return WorkflowStep(label=label, status="completed" if done else "pending")

    return [
        step("Consultation", True),
        step("KYC Verification", status != LoanStatus.INITIAL),
        step("Credit Underwriting", status not in (LoanStatus.INITIAL, LoanStatus.KYC_PENDING)),
        step("Final Sanction", status == LoanStatus.APPROVED),
    ]


def summarize(session: LoanSession) -> SessionSummary:
    state = session.state
    return SessionSummary(
        session_id=session.id,
        active_agent=state.active_agent.value,
        status_message=state.status_message,
        pending_upload=state.pending_upload,
        input_hint=UploadGate.input_hint(state),
        busy=session.busy,
        application=state.record,
        steps=workflow_steps(state.record.status),
    )
