# swiftloan/services/tool_interpreter.py
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from swiftloan.agents import tools
from swiftloan.models.domain_models import (
    AgentType, DocumentType, LoanStage, LoanStatus, SessionState, ToolInvocation,
)

logger = logging.getLogger(__name__)

APPROVAL_REASON = "meets financial criteria"

# "decision" and "sanction" are not statuses of their own; the record stays in
# underwriting until approveLoan / rejectLoan sets a terminal status.
STAGE_TO_STATUS: Dict[LoanStage, LoanStatus] = {
    LoanStage.KYC: LoanStatus.KYC_PENDING,
    LoanStage.UNDERWRITING: LoanStatus.UNDERWRITING,
    LoanStage.DECISION: LoanStatus.UNDERWRITING,
    LoanStage.SANCTION: LoanStatus.UNDERWRITING,
}


# --- argument schemas ---

class _ToolArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class UpdateStageArgs(_ToolArgs):
    stage: LoanStage
    agent: AgentType
    status_message: str = Field(alias="statusMessage", min_length=1)


class RequestDocumentArgs(_ToolArgs):
    doc_type: DocumentType = Field(alias="docType")


class ApproveLoanArgs(_ToolArgs):
    approved_amount: float = Field(alias="approvedAmount", gt=0)
    interest_rate: float = Field(alias="interestRate", ge=0)
    tenure_months: int = Field(alias="tenureMonths", gt=0)
    applicant_name: str = Field(alias="applicantName", min_length=1)
    evidence: str = Field(min_length=1)
    purpose: Optional[str] = None


class RejectLoanArgs(_ToolArgs):
    reason: str = Field(min_length=1)
    evidence: str = Field(min_length=1)


# --- effects ---

def _apply_update_stage(state: SessionState, args: UpdateStageArgs) -> SessionState:
    record = state.record
    target = STAGE_TO_STATUS[args.stage]
    if target.rank > record.status.rank:
        record = record.model_copy(update={"status": target})
    return state.model_copy(update={
        "active_agent": args.agent,
        "status_message": args.status_message,
        "record": record,
    })


def _apply_request_document(state: SessionState, args: RequestDocumentArgs) -> SessionState:
    return state.model_copy(update={"pending_upload": args.doc_type})


def _apply_approve(state: SessionState, args: ApproveLoanArgs) -> SessionState:
    update = {
        "status": LoanStatus.APPROVED,
        "loan_amount": args.approved_amount,
        "interest_rate": args.interest_rate,
        "tenure_months": args.tenure_months,
        "applicant_name": args.applicant_name,
        "decision_reason": APPROVAL_REASON,
        "decision_evidence": args.evidence,
    }
    if args.purpose:
        update["purpose"] = args.purpose
    return state.model_copy(update={
        "active_agent": AgentType.SANCTION,
        "status_message": "Loan approved",
        "record": state.record.model_copy(update=update),
    })


def _apply_reject(state: SessionState, args: RejectLoanArgs) -> SessionState:
    record = state.record.model_copy(update={
        "status": LoanStatus.REJECTED,
        "decision_reason": args.reason,
        "decision_evidence": args.evidence,
    })
    return state.model_copy(update={
        "active_agent": AgentType.SANCTION,
        "status_message": "Loan rejected",
        "record": record,
    })


_Handler = Tuple[Type[_ToolArgs], Callable[[SessionState, _ToolArgs], SessionState]]

HANDLERS: Dict[str, _Handler] = {
    tools.UPDATE_LOAN_STAGE: (UpdateStageArgs, _apply_update_stage),
    tools.REQUEST_DOCUMENT: (RequestDocumentArgs, _apply_request_document),
    tools.APPROVE_LOAN: (ApproveLoanArgs, _apply_approve),
    tools.REJECT_LOAN: (RejectLoanArgs, _apply_reject),
}


@dataclass
class InterpretationResult:
    state: SessionState
    applied: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def interpret_tool_calls(calls: Iterable[ToolInvocation], state: SessionState) -> InterpretationResult:
    """
    Apply a batch of tool calls, in order, to a copy of `state`.

    The caller's state is never touched; the returned snapshot is meant to be
    committed as a whole once the rest of the turn has succeeded.
    - unknown tool names are ignored
    - calls with missing or out-of-range arguments are skipped whole
    - once the record is approved or rejected, every further call is ignored
    """
    result = InterpretationResult(state=state.model_copy(deep=True))

    for call in calls:
        handler = HANDLERS.get(call.name)
        if handler is None:
            logger.info("ignoring unknown tool %r", call.name)
            result.skipped.append(call.name)
            continue

        args_model, apply = handler
        try:
            args = args_model.model_validate(call.args or {})
        except ValidationError as exc:
            logger.warning("skipping malformed %s call: %s", call.name, exc.errors())
            result.skipped.append(call.name)
            continue

        if result.state.record.is_terminal:
            logger.warning(
                "application already %s; ignoring %s",
                result.state.record.status.value, call.name,
            )
            result.skipped.append(call.name)
            continue

        logger.info("applying tool %s args=%s", call.name, call.args)
        result.state = apply(result.state, args)
        result.applied.append(call.name)

    return result
