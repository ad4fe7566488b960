# swiftloan/models/domain_models.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Any, Dict, List, Literal
from datetime import datetime
from enum import Enum
import uuid


class AgentType(str, Enum):
    SALES = "Sales Agent"
    KYC = "KYC Agent"
    UNDERWRITING = "Underwriting Agent"
    SANCTION = "Sanction Authority"


class LoanStatus(str, Enum):
    INITIAL = "initial"
    KYC_PENDING = "kyc_pending"
    UNDERWRITING = "underwriting"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def rank(self) -> int:
        # approved and rejected share the last rank; both are terminal
        return _STATUS_RANK[self]

    @property
    def is_terminal(self) -> bool:
        return self in (LoanStatus.APPROVED, LoanStatus.REJECTED)


_STATUS_RANK = {
    LoanStatus.INITIAL: 0,
    LoanStatus.KYC_PENDING: 1,
    LoanStatus.UNDERWRITING: 2,
    LoanStatus.APPROVED: 3,
    LoanStatus.REJECTED: 3,
}


class LoanStage(str, Enum):
    """Stage tags the model may pass to updateLoanStage."""
    KYC = "kyc"
    UNDERWRITING = "underwriting"
    DECISION = "decision"
    SANCTION = "sanction"


class DocumentType(str, Enum):
    IDENTITY_PROOF = "identity_proof"
    INCOME_PROOF = "income_proof"


class TurnRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


# --- Dialogue ---

class Attachment(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    # base64 text, possibly still wrapped as a data URI
    data: str
    mime_type: Optional[str] = None
    url: Optional[str] = None  # display only


class DialogueTurn(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: TurnRole
    content: str = ""
    created_at: datetime = Field(default_factory=datetime.utcnow)
    sender: Optional[str] = None  # e.g. "Sales Agent"
    attachment: Optional[Attachment] = None


# --- Application state ---

class ApplicationRecord(BaseModel):
    status: LoanStatus = LoanStatus.INITIAL
    applicant_name: Optional[str] = None
    loan_amount: Optional[float] = None
    purpose: Optional[str] = None
    interest_rate: Optional[float] = None
    tenure_months: Optional[int] = None
    # only set together with a terminal status
    decision_reason: Optional[str] = None
    decision_evidence: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


class SessionState(BaseModel):
    """Everything a tool batch may change, committed as one unit."""
    active_agent: AgentType = AgentType.SALES
    status_message: str = "Collecting loan requirements"
    record: ApplicationRecord = Field(default_factory=ApplicationRecord)
    pending_upload: Optional[DocumentType] = None


# --- Model request / response ---

class InlineData(BaseModel):
    mime_type: str
    data: str  # base64, prefix stripped


class ContentPart(BaseModel):
    text: Optional[str] = None
    inline_data: Optional[InlineData] = None


class ContentEntry(BaseModel):
    role: Literal["user", "model"]
    parts: List[ContentPart]


class ModelRequest(BaseModel):
    system_instruction: str
    contents: List[ContentEntry]
    tools: List[Dict[str, Any]]
    temperature: float


class ToolInvocation(BaseModel):
    name: str
    args: Dict[str, Any] = Field(default_factory=dict)


class ModelResponse(BaseModel):
    text: str = ""
    tool_calls: List[ToolInvocation] = Field(default_factory=list)
