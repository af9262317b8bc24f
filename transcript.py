# transcript.py
from dataclasses import dataclass
from typing import Iterable, List

from google.genai import types

from models import Message

USER = "user"
MODEL = "model"


def to_genai_role(role: str) -> str:
    """Map a client-side role name onto the two roles Gemini understands."""
    if (role or "").strip().lower() in ("assistant", "model", "ai"):
        return MODEL
    # "system" and anything unknown are sent as user turns
    return USER


@dataclass(frozen=True)
class Turn:
    role: str
    text: str

    def to_content(self) -> types.Content:
        return types.Content(role=self.role, parts=[types.Part(text=self.text)])


class Transcript:
    """Ordered, append-only list of role-tagged turns held in memory."""

    def __init__(self) -> None:
        self._turns: List[Turn] = []

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self):
        return iter(self._turns)

    @property
    def turns(self) -> List[Turn]:
        return list(self._turns)

    def append(self, role: str, text: str) -> bool:
        text = (text or "").strip()
        if not text:
            return False
        self._turns.append(Turn(role=to_genai_role(role), text=text))
        return True

    def add_user(self, text: str) -> bool:
        return self.append(USER, text)

    def add_model(self, text: str) -> bool:
        return self.append(MODEL, text)

    def extend(self, history: Iterable[Message]) -> None:
        for msg in history:
            self.append(msg.role, msg.content)

    def contents(self) -> List[types.Content]:
        return [t.to_content() for t in self._turns]
