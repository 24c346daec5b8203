"""Agent roster domain model."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Agent:
    """A worker agent (or the hub itself) listed in the roster file."""

    id: str
    person_display_name: str = ""
    role_display_name: str = ""

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Agent must have an id")

    def to_doc(self) -> dict:
        return {
            "id": self.id,
            "personDisplayName": self.person_display_name,
            "roleDisplayName": self.role_display_name,
        }

    @classmethod
    def from_doc(cls, agent_id: str, doc: dict | None) -> Agent:
        doc = doc or {}
        return cls(
            id=agent_id,
            person_display_name=doc.get("personDisplayName") or "",
            role_display_name=doc.get("roleDisplayName") or "",
        )
