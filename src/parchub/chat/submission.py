"""Composer buffer and outgoing message validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from ..utils.scheduling import LoopScheduler, Scheduler, fire_and_forget

__all__ = ["RejectionReason", "SubmissionResult", "ChatSubmission", "AppendMessage"]

LOGGER = logging.getLogger(__name__)

AppendMessage = Callable[[str], "None | Awaitable[Any]"]


class RejectionReason(Enum):
    EMPTY_MESSAGE = "empty_message"


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    """Outcome of :meth:`ChatSubmission.submit`.

    ``reason`` is ``None`` when the text was forwarded.
    """

    text: str = ""
    reason: Optional[RejectionReason] = None

    @property
    def accepted(self) -> bool:
        return self.reason is None

    @classmethod
    def rejected(cls, reason: RejectionReason) -> "SubmissionResult":
        return cls(reason=reason)


class ChatSubmission:
    """Validates composer text and forwards it to the message collaborator."""

    def __init__(self, append_message: AppendMessage, *, scheduler: Scheduler | None = None) -> None:
        if append_message is None:
            raise ValueError("append_message is required")
        self._append_message = append_message
        self._scheduler = scheduler or LoopScheduler()
        self._buffer = ""

    @property
    def composer_text(self) -> str:
        return self._buffer

    def set_composer_text(self, text: str) -> None:
        self._buffer = text

    def clear_composer(self) -> None:
        self._buffer = ""

    def submit(self, raw_text: str | None = None) -> SubmissionResult:
        """Forward trimmed text once and clear the composer.

        Whitespace-only input is rejected without touching the buffer or the
        collaborator. ``raw_text`` defaults to the current composer buffer.
        """

        source = self._buffer if raw_text is None else raw_text
        text = source.strip()
        if not text:
            LOGGER.debug("Rejected empty chat submission")
            return SubmissionResult.rejected(RejectionReason.EMPTY_MESSAGE)
        fire_and_forget(self._scheduler, self._append_message, text)
        self.clear_composer()
        return SubmissionResult(text=text)
