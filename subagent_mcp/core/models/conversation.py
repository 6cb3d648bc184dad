"""Conversation snapshots for the multi-turn grouping dialog.

A Conversation is an immutable value: every append returns a new snapshot,
so a retry can branch from any saved prefix without touching other attempts.
"""

from typing import Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant"]


class ConversationTurn(BaseModel):
    """A single message in a conversation."""

    model_config = ConfigDict(frozen=True)

    role: Role = Field(..., description="Who sent this message")
    content: str = Field(..., description="The message content")


class Conversation(BaseModel):
    """Ordered, append-only list of turns."""

    model_config = ConfigDict(frozen=True)

    turns: Tuple[ConversationTurn, ...] = Field(default_factory=tuple)

    def append(self, role: Role, content: str) -> "Conversation":
        """Return a new conversation with one more turn."""
        turn = ConversationTurn(role=role, content=content)
        return Conversation(turns=self.turns + (turn,))

    def with_system(self, content: str) -> "Conversation":
        """Return a copy whose leading system turn is replaced (or inserted)."""
        system = ConversationTurn(role="system", content=content)
        if self.turns and self.turns[0].role == "system":
            return Conversation(turns=(system,) + self.turns[1:])
        return Conversation(turns=(system,) + self.turns)

    def to_llm_messages(self) -> list[dict[str, str]]:
        """Convert to the role/content dicts LLM clients expect."""
        return [{"role": t.role, "content": t.content} for t in self.turns]

    def __len__(self) -> int:
        return len(self.turns)
