import uuid
from datetime import datetime
from typing import Dict, Optional

from swiftloan.agents.personas import greeting_for
from swiftloan.models.domain_models import AgentType, SessionState, TurnRole
from swiftloan.services.dialogue_log import DialogueLog


class LoanSession:
    """
    One customer's conversation. `state` is only ever replaced as a whole by the
    turn orchestrator; `busy` guards against overlapping model calls.
    """

    def __init__(self, session_id: Optional[str] = None):
        self.id = session_id or str(uuid.uuid4())
        self.created_at = datetime.utcnow()
        self.state = SessionState()
        self.log = DialogueLog()
        self.busy = False
        self.log.add(TurnRole.ASSISTANT, greeting_for(AgentType.SALES), sender=AgentType.SALES.value)


class SessionStore:
    # in-process only; sessions do not survive a restart
    _store: Dict[str, LoanSession] = {}

    @classmethod
    def create_session(cls, session_id: Optional[str] = None) -> LoanSession:
        session = LoanSession(session_id)
        cls._store[session.id] = session
        return session

    @classmethod
    def get_session(cls, session_id: str) -> Optional[LoanSession]:
        return cls._store.get(session_id)

    @classmethod
    def clear(cls):
        cls._store.clear()
