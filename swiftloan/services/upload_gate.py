# swiftloan/services/upload_gate.py
from typing import Optional

from swiftloan.agents.personas import UPLOAD_PROMPTS
from swiftloan.models.domain_models import DocumentType, SessionState


class UploadGate:
    """
    Tracks whether a document has been requested and not yet supplied.

    The pending document lives on SessionState so that a tool batch can set it
    atomically with the rest of the state; the gate only decides when it clears
    and how it is phrased.
    """

    def __init__(self, clear_on_any_turn: bool = True):
        self.clear_on_any_turn = clear_on_any_turn

    def on_user_turn(self, state: SessionState, has_attachment: bool) -> SessionState:
        if state.pending_upload is None:
            return state
        if self.clear_on_any_turn or has_attachment:
            return state.model_copy(update={"pending_upload": None})
        return state

    @staticmethod
    def prompt_for(doc_type: DocumentType) -> str:
        return UPLOAD_PROMPTS[doc_type]

    @staticmethod
    def input_hint(state: SessionState) -> Optional[str]:
        """Placeholder text for the message box while a document is outstanding."""
        if state.pending_upload is None:
            return None
        return f"Please upload your {state.pending_upload.value.replace('_', ' ')}..."
