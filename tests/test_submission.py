"""Tests for composer validation and forwarding."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from parchub.chat.submission import ChatSubmission, RejectionReason
from tests.helpers import ManualScheduler


def test_trimmed_text_forwarded_once_and_buffer_cleared(scheduler: ManualScheduler) -> None:
    append = MagicMock()
    submission = ChatSubmission(append, scheduler=scheduler)
    submission.set_composer_text("  What does the data say?  ")

    result = submission.submit()

    assert result.accepted
    assert result.text == "What does the data say?"
    append.assert_called_once_with("What does the data say?")
    assert submission.composer_text == ""


@pytest.mark.parametrize("raw", ["", "   ", "\n\t "])
def test_blank_text_rejected_without_side_effects(scheduler: ManualScheduler, raw: str) -> None:
    append = MagicMock()
    submission = ChatSubmission(append, scheduler=scheduler)
    submission.set_composer_text(raw)

    result = submission.submit()

    assert not result.accepted
    assert result.reason is RejectionReason.EMPTY_MESSAGE
    append.assert_not_called()
    assert submission.composer_text == raw


def test_explicit_text_overrides_buffer(scheduler: ManualScheduler) -> None:
    append = MagicMock()
    submission = ChatSubmission(append, scheduler=scheduler)
    submission.set_composer_text("draft")

    submission.submit("sent directly")

    append.assert_called_once_with("sent directly")
    assert submission.composer_text == ""


def test_async_append_is_not_awaited(scheduler: ManualScheduler) -> None:
    received: list[str] = []

    async def _append(text: str) -> None:
        received.append(text)

    submission = ChatSubmission(_append, scheduler=scheduler)

    result = submission.submit("hello")

    assert result.accepted
    assert received == []
    assert len(scheduler.spawned) == 1
    assert submission.composer_text == ""
    scheduler.close_spawned()


def test_append_failure_propagates_and_keeps_buffer(scheduler: ManualScheduler) -> None:
    append = MagicMock(side_effect=RuntimeError("feed offline"))
    submission = ChatSubmission(append, scheduler=scheduler)
    submission.set_composer_text("keep me")

    with pytest.raises(RuntimeError):
        submission.submit()

    assert submission.composer_text == "keep me"


def test_append_collaborator_required() -> None:
    with pytest.raises(ValueError):
        ChatSubmission(None)  # type: ignore[arg-type]
