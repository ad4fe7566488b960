# swiftloan/api/routes_sessions.py
import base64
import logging
import uuid as _uuid
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse

from swiftloan.core.config import settings
from swiftloan.core.errors import SanctionLetterUnavailable
from swiftloan.core.session import LoanSession, SessionStore
from swiftloan.models.domain_models import Attachment
from swiftloan.schemas.session_schemas import (
    ChatMessageIn, ChatResponse, MessagesOut, SessionSummary, summarize,
)
from swiftloan.services.chat_service import TurnOrchestrator, TurnOutcome
from swiftloan.services.pdf_service import augment_pdf_with_pypdf, generate_sanction_pdf

router = APIRouter(prefix="/sessions", tags=["sessions"])

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_TEXT = "Here is the requested document."


def get_orchestrator() -> TurnOrchestrator:
    return TurnOrchestrator()


def get_loan_session(session_id: str) -> LoanSession:
    session = SessionStore.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _upload_root() -> Path:
    return Path(settings.UPLOAD_DIR)


def _chat_response(session: LoanSession, outcome: TurnOutcome) -> ChatResponse:
    return ChatResponse(
        session_id=session.id,
        accepted=outcome.accepted,
        reply=outcome.assistant_turn,
        error=outcome.error_turn,
        session=summarize(session),
    )


@router.post("/start", response_model=SessionSummary)
def create_session():
    session = SessionStore.create_session()
    logger.info("started session %s", session.id)
    return summarize(session)


@router.get("/{session_id}", response_model=SessionSummary)
def get_session_summary(session: LoanSession = Depends(get_loan_session)):
    return summarize(session)


@router.get("/{session_id}/messages", response_model=MessagesOut)
def get_messages(session: LoanSession = Depends(get_loan_session)):
    return MessagesOut(messages=session.log.turns())


@router.post("/{session_id}/message", response_model=ChatResponse)
async def post_message(
    message: ChatMessageIn,
    session: LoanSession = Depends(get_loan_session),
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
):
    attachment = message.attachment.to_attachment() if message.attachment else None
    outcome = await orchestrator.handle_user_message(session, message.text, attachment)
    return _chat_response(session, outcome)


@router.post("/{session_id}/upload", response_model=ChatResponse)
async def upload_document(
    file: UploadFile = File(...),
    text: Optional[str] = Form(None),
    session: LoanSession = Depends(get_loan_session),
    orchestrator: TurnOrchestrator = Depends(get_orchestrator),
):
    raw = await file.read()
    mime_type = file.content_type or "image/jpeg"

    dest_dir = _upload_root() / session.id
    dest_dir.mkdir(parents=True, exist_ok=True)
    filename = f"{_uuid.uuid4().hex}_{Path(file.filename or 'upload').name}"
    (dest_dir / filename).write_bytes(raw)

    # same shape a browser FileReader.readAsDataURL produces
    data_uri = f"data:{mime_type};base64,{base64.b64encode(raw).decode('ascii')}"
    attachment = Attachment(
        data=data_uri,
        mime_type=mime_type,
        url=f"/api/sessions/{session.id}/uploads/{filename}",
    )
    outcome = await orchestrator.handle_user_message(session, text or DEFAULT_UPLOAD_TEXT, attachment)
    return _chat_response(session, outcome)


@router.get("/{session_id}/uploads/{filename}")
def serve_upload(filename: str, session: LoanSession = Depends(get_loan_session)):
    path = _upload_root() / session.id / Path(filename).name
    if not path.exists():
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(str(path), media_type="application/octet-stream", filename=path.name)


@router.get("/{session_id}/sanction-letter")
def get_sanction_letter(session: LoanSession = Depends(get_loan_session)):
    record = session.state.record
    reference_id = str(_uuid.uuid4())[:8]
    pdf_path = str(_upload_root() / session.id / f"sanction_{reference_id}.pdf")

    try:
        generate_sanction_pdf(pdf_path, record, reference_id)
    except SanctionLetterUnavailable:
        raise HTTPException(status_code=404, detail="No approved application / sanction letter available")

    augment_pdf_with_pypdf(pdf_path, {"ref": reference_id, "applicant": record.applicant_name or ""})
    return FileResponse(pdf_path, media_type="application/pdf", filename=f"sanction_{reference_id}.pdf")
