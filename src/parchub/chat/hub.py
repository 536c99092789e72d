"""Research Hub channel state: transcript, roster and composer for one community."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Sequence

from ..utils.scheduling import Scheduler
from .message_model import ChatMessage, Identity
from .roster import PresenceRoster, RosterView
from .submission import AppendMessage, ChatSubmission, SubmissionResult
from .transcript import TranscriptStore, TranscriptView

__all__ = ["HubView", "ResearchHub", "channel_slug", "HUB_CAPABILITIES"]

LOGGER = logging.getLogger(__name__)

HUB_CAPABILITIES: tuple[str, ...] = ("RAG Enabled", "Context Aware", "Persona Simulation")
_WHITESPACE_RE = re.compile(r"\s+")


def channel_slug(community_name: str) -> str:
    """Lowercase ``community_name`` with whitespace runs collapsed to ``-``."""

    return _WHITESPACE_RE.sub("-", community_name.lower())


@dataclass(frozen=True, slots=True)
class HubView:
    """Everything the hub page needs after a feed update."""

    transcript: TranscriptView
    roster: RosterView
    scroll_to_newest: bool = False


class ResearchHub:
    """Wires the external feeds into the derived transcript and roster views."""

    def __init__(
        self,
        *,
        community_name: str,
        theme_description: str,
        viewer: Identity,
        append_message: AppendMessage,
        scheduler: Scheduler | None = None,
        roster: PresenceRoster | None = None,
    ) -> None:
        self.community_name = community_name
        self.theme_description = theme_description
        self._viewer = viewer
        self._transcript = TranscriptStore()
        self._roster = roster or PresenceRoster()
        self._submission = ChatSubmission(append_message, scheduler=scheduler)
        self._online_users: tuple[Identity, ...] = ()

    # ------------------------------------------------------------------
    # Presentation helpers
    # ------------------------------------------------------------------
    @property
    def title(self) -> str:
        return f"{self.community_name} Research Hub"

    @property
    def composer_placeholder(self) -> str:
        return f"Message #{channel_slug(self.community_name)}"

    @property
    def capabilities(self) -> tuple[str, ...]:
        return HUB_CAPABILITIES

    @property
    def viewer(self) -> Identity:
        return self._viewer

    @property
    def transcript(self) -> TranscriptStore:
        return self._transcript

    @property
    def composer(self) -> ChatSubmission:
        return self._submission

    # ------------------------------------------------------------------
    # Feed handling
    # ------------------------------------------------------------------
    def update_feed(
        self,
        *,
        messages: Sequence[ChatMessage] | None = None,
        online_users: Sequence[Identity] | None = None,
        viewer: Identity | None = None,
    ) -> HubView:
        """Replace whichever feeds changed and re-derive the page state.

        Omitted feeds keep their previous value, so a roster-only update never
        produces a scroll signal.
        """

        if viewer is not None:
            self._viewer = viewer
        if online_users is not None:
            self._online_users = tuple(online_users)
        grew = False
        if messages is not None:
            grew = self._transcript.observe(messages)
        if grew and LOGGER.isEnabledFor(logging.DEBUG):
            LOGGER.debug(
                "New message in #%s: %s",
                channel_slug(self.community_name),
                self._transcript.messages[-1].to_dict(),
            )
        return self.view(scroll_to_newest=grew)

    def view(self, *, scroll_to_newest: bool = False) -> HubView:
        return HubView(
            transcript=self._transcript.render(None, self._viewer),
            roster=self._roster.view(self._viewer, self._online_users),
            scroll_to_newest=scroll_to_newest,
        )

    def send(self, raw_text: str | None = None) -> SubmissionResult:
        result = self._submission.submit(raw_text)
        if result.accepted:
            LOGGER.debug("Forwarded message to #%s", channel_slug(self.community_name))
        return result
