"""Participant and chat message data models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Mapping, Optional

__all__ = ["IdentityKind", "Identity", "ChatMessage"]


class IdentityKind(Enum):
    """Distinguishes the viewing researcher from simulated members."""

    HUMAN = auto()
    SIMULATED = auto()


@dataclass(frozen=True, slots=True)
class Identity:
    """A chat participant as supplied by the hosting environment."""

    id: str
    name: str
    display_image_ref: str = ""
    kind: IdentityKind = IdentityKind.HUMAN
    email: Optional[str] = None
    persona_summary: str = ""

    @classmethod
    def human(cls, *, id: str, name: str, email: str, display_image_ref: str = "") -> "Identity":
        return cls(
            id=id,
            name=name,
            display_image_ref=display_image_ref,
            kind=IdentityKind.HUMAN,
            email=email,
        )

    @classmethod
    def simulated(
        cls,
        *,
        id: str,
        name: str,
        persona_summary: str = "",
        display_image_ref: str = "",
    ) -> "Identity":
        return cls(
            id=id,
            name=name,
            display_image_ref=display_image_ref,
            kind=IdentityKind.SIMULATED,
            persona_summary=persona_summary,
        )

    @property
    def is_human(self) -> bool:
        return self.kind is IdentityKind.HUMAN

    @property
    def key(self) -> str:
        """Return the value used for "is this my message" comparisons.

        Humans are keyed by email; simulated members (and humans missing an
        email) fall back to their id.
        """

        if self.kind is IdentityKind.HUMAN and self.email:
            return self.email
        return self.id

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Identity":
        """Build an identity from a feed payload using the hub's wire keys."""

        email = payload.get("email")
        persona = payload.get("personaSummary", payload.get("persona_summary"))
        image = payload.get("picture") or payload.get("avatarUrl") or payload.get("display_image_ref") or ""
        kind = IdentityKind.HUMAN if email else IdentityKind.SIMULATED
        return cls(
            id=str(payload.get("id") or email or ""),
            name=str(payload.get("name") or ""),
            display_image_ref=str(image),
            kind=kind,
            email=str(email) if email else None,
            persona_summary=str(persona or ""),
        )


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """A single transcript row; immutable once created by the feed."""

    id: str
    author: Identity
    text: str
    timestamp: str = ""

    @property
    def byline(self) -> str:
        """Return the ``"<name>, <timestamp>"`` caption shown under the bubble."""

        if not self.timestamp:
            return self.author.name
        return f"{self.author.name}, {self.timestamp}"

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ChatMessage":
        author_payload = payload.get("user") or payload.get("author") or {}
        return cls(
            id=str(payload.get("id") or ""),
            author=Identity.from_dict(author_payload),
            text=str(payload.get("text") or ""),
            timestamp=str(payload.get("timestamp") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize the message for logging or export."""

        return {
            "id": self.id,
            "author_id": self.author.id,
            "author_name": self.author.name,
            "text": self.text,
            "timestamp": self.timestamp,
        }
