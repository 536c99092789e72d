"""Derived transcript view and auto-scroll tracking for the hub channel."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Sequence

from .message_model import ChatMessage, Identity

__all__ = [
    "MessageAlignment",
    "RenderedMessage",
    "TranscriptView",
    "TranscriptStore",
    "render_transcript",
    "EMPTY_TRANSCRIPT_TITLE",
    "EMPTY_TRANSCRIPT_HINT",
]

LOGGER = logging.getLogger(__name__)

EMPTY_TRANSCRIPT_TITLE = "No messages yet."
EMPTY_TRANSCRIPT_HINT = "Start the conversation to meet the Founding Members!"


class MessageAlignment(Enum):
    """Which side of the channel a message bubble sits on."""

    SELF = "self"
    OTHER = "other"


class ScrollListener(Protocol):
    """Callback fired once per transcript growth event."""

    def __call__(self, newest: ChatMessage) -> None:
        ...


@dataclass(frozen=True, slots=True)
class RenderedMessage:
    message: ChatMessage
    alignment: MessageAlignment

    @property
    def is_self(self) -> bool:
        return self.alignment is MessageAlignment.SELF


@dataclass(frozen=True, slots=True)
class TranscriptView:
    """Output of :func:`render_transcript`.

    ``is_empty`` is an explicit state so callers can show placeholder guidance
    instead of treating an empty list as a rendering failure.
    """

    rows: tuple[RenderedMessage, ...]
    is_empty: bool
    placeholder_title: str = ""
    placeholder_hint: str = ""

    def __len__(self) -> int:
        return len(self.rows)


def render_transcript(messages: Sequence[ChatMessage], viewer: Identity) -> TranscriptView:
    """Classify each message relative to ``viewer`` preserving feed order."""

    if not messages:
        return TranscriptView(
            rows=(),
            is_empty=True,
            placeholder_title=EMPTY_TRANSCRIPT_TITLE,
            placeholder_hint=EMPTY_TRANSCRIPT_HINT,
        )
    viewer_key = viewer.key
    rows = tuple(
        RenderedMessage(
            message=message,
            alignment=MessageAlignment.SELF if message.author.key == viewer_key else MessageAlignment.OTHER,
        )
        for message in messages
    )
    return TranscriptView(rows=rows, is_empty=False)


class TranscriptStore:
    """Holds the latest feed observation and signals growth for auto-scroll.

    The feed itself is owned by the hosting environment and replaced wholesale;
    this store only keeps an immutable copy of the last observation.
    """

    def __init__(self) -> None:
        self._messages: tuple[ChatMessage, ...] = ()
        self._message_ids: frozenset[str] = frozenset()
        self._scroll_listeners: list[ScrollListener] = []

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return self._messages

    def render(self, messages: Sequence[ChatMessage] | None, viewer: Identity) -> TranscriptView:
        """Render ``messages`` (``None`` means the last observation) for ``viewer``."""

        source = self._messages if messages is None else messages
        return render_transcript(source, viewer)

    def observe(self, messages: Sequence[ChatMessage]) -> bool:
        """Record a new feed observation.

        Returns ``True`` and notifies scroll listeners when the feed grew:
        either the length increased or, at equal length, the newest message is
        one the previous observation did not contain. Repeated observations,
        shrinking feeds and reorders never signal.
        """

        snapshot = tuple(messages)
        grew = self._is_growth(snapshot)
        self._messages = snapshot
        self._message_ids = frozenset(message.id for message in snapshot)
        if grew:
            LOGGER.debug("Transcript grew to %d message(s)", len(snapshot))
            self._emit_scroll(snapshot[-1])
        return grew

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def add_scroll_listener(self, listener: ScrollListener) -> None:
        """Register a callback fired when the view should scroll to the newest message."""

        self._scroll_listeners.append(listener)

    def remove_scroll_listener(self, listener: ScrollListener) -> None:
        try:
            self._scroll_listeners.remove(listener)
        except ValueError:  # pragma: no cover - defensive guard
            pass

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _is_growth(self, snapshot: tuple[ChatMessage, ...]) -> bool:
        if not snapshot:
            return False
        previous = self._messages
        if len(snapshot) > len(previous):
            return True
        if len(snapshot) < len(previous):
            return False
        return snapshot[-1].id != previous[-1].id and snapshot[-1].id not in self._message_ids

    def _emit_scroll(self, newest: ChatMessage) -> None:
        for listener in list(self._scroll_listeners):
            listener(newest)
