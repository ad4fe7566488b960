# swiftloan/services/dialogue_log.py
from typing import Iterator, List, Optional

from swiftloan.models.domain_models import Attachment, DialogueTurn, TurnRole


class DialogueLog:
    """
    Append-only record of the conversation as the user experienced it.
    Turns are frozen pydantic models; nothing is ever edited or removed.
    """

    def __init__(self):
        self._turns: List[DialogueTurn] = []

    def append(self, turn: DialogueTurn) -> DialogueTurn:
        self._turns.append(turn)
        return turn

    def add(
        self,
        role: TurnRole,
        content: str,
        sender: Optional[str] = None,
        attachment: Optional[Attachment] = None,
    ) -> DialogueTurn:
        return self.append(DialogueTurn(role=role, content=content, sender=sender, attachment=attachment))

    def replayable(self) -> List[DialogueTurn]:
        # system turns are UI-only error annotations
        return [t for t in self._turns if t.role != TurnRole.SYSTEM]

    def turns(self) -> List[DialogueTurn]:
        return list(self._turns)

    def __iter__(self) -> Iterator[DialogueTurn]:
        return iter(list(self._turns))

    def __len__(self) -> int:
        return len(self._turns)
