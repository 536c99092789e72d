"""Online-members roster merging the viewer with simulated founding members."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Sequence

from .message_model import Identity

__all__ = [
    "RosterEntryKind",
    "RosterEntry",
    "RosterView",
    "PresenceRoster",
    "merge_roster",
    "truncate_persona",
    "FOUNDING_MEMBERS_LABEL",
    "HUMAN_SUBTITLE",
]

FOUNDING_MEMBERS_LABEL = "Founding Members (AI)"
HUMAN_SUBTITLE = "Human Researcher"
PERSONA_DISPLAY_LIMIT = 120
_ELLIPSIS = "…"


class RosterEntryKind(Enum):
    HUMAN = auto()
    SIMULATED = auto()


@dataclass(frozen=True, slots=True)
class RosterEntry:
    """One row of the online-members panel."""

    identity: Identity
    kind: RosterEntryKind
    display_name: str
    subtitle: str
    persona_summary: str = ""

    @property
    def is_human(self) -> bool:
        return self.kind is RosterEntryKind.HUMAN


@dataclass(frozen=True, slots=True)
class RosterView:
    entries: tuple[RosterEntry, ...]
    section_marker: str | None = None

    @property
    def human(self) -> RosterEntry:
        return self.entries[0]

    @property
    def simulated(self) -> tuple[RosterEntry, ...]:
        return self.entries[1:]


def truncate_persona(summary: str, limit: int = PERSONA_DISPLAY_LIMIT) -> str:
    """Shorten a persona summary for display, preferring a word boundary."""

    text = " ".join(summary.split())
    if limit <= 0:
        return ""
    if len(text) <= limit:
        return text
    cut = text[: limit - len(_ELLIPSIS)]
    boundary = cut.rfind(" ")
    if boundary > 0:
        cut = cut[:boundary]
    return cut.rstrip(" ,.;:") + _ELLIPSIS


def merge_roster(
    human: Identity,
    simulated: Sequence[Identity],
    *,
    persona_limit: int = PERSONA_DISPLAY_LIMIT,
) -> tuple[RosterEntry, ...]:
    """Return the viewer first, then simulated members in feed order."""

    entries = [
        RosterEntry(
            identity=human,
            kind=RosterEntryKind.HUMAN,
            display_name=f"{human.name} (You)",
            subtitle=HUMAN_SUBTITLE,
        )
    ]
    for member in simulated:
        entries.append(
            RosterEntry(
                identity=member,
                kind=RosterEntryKind.SIMULATED,
                display_name=member.name,
                subtitle=truncate_persona(member.persona_summary, persona_limit),
                persona_summary=member.persona_summary,
            )
        )
    return tuple(entries)


class PresenceRoster:
    """Recomputes the roster view whenever the presence feed is replaced."""

    def __init__(self, *, persona_limit: int = PERSONA_DISPLAY_LIMIT) -> None:
        self._persona_limit = persona_limit

    def merge(self, human: Identity, simulated: Sequence[Identity]) -> tuple[RosterEntry, ...]:
        return merge_roster(human, simulated, persona_limit=self._persona_limit)

    def view(self, human: Identity, simulated: Sequence[Identity]) -> RosterView:
        """Merge and attach the founding-members section marker when needed."""

        entries = self.merge(human, simulated)
        marker = FOUNDING_MEMBERS_LABEL if len(entries) > 1 else None
        return RosterView(entries=entries, section_marker=marker)
