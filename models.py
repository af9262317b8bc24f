# models.py
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _null_as_empty(value, empty):
    # JSON null is treated like an omitted field
    return empty if value is None else value


class Message(BaseModel):
    # Accepts "user" | "assistant" | "model" | "system"
    role: str = Field("user", description="Author of the turn")
    content: str = Field("", description="Turn text")

    @field_validator("role", "content", mode="before")
    @classmethod
    def _null_text(cls, value):
        return _null_as_empty(value, "")


class ChatRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    message: str = Field("", description="Latest user message (optional when history is sent)")
    history: List[Message] = Field(default_factory=list, description="Prior turns, oldest first")
    model: str = Field("", description="Optional model override")

    @field_validator("message", "model", mode="before")
    @classmethod
    def _null_text(cls, value):
        return _null_as_empty(value, "")

    @field_validator("history", mode="before")
    @classmethod
    def _null_history(cls, value):
        return _null_as_empty(value, [])

    def has_content(self) -> bool:
        """True when the message or at least one history turn has non-blank text."""
        return bool(self.message.strip()) or any(m.content.strip() for m in self.history)


class ChatResponse(BaseModel):
    reply: str
    model: str


class EmptyReplyResponse(BaseModel):
    reply: str = ""
    model: str
    note: str
    ts: str


class PromptResponse(BaseModel):
    prompts: List[str]
    model: str


class ErrorResponse(BaseModel):
    error: str
