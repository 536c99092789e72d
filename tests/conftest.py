"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from parchub.chat.message_model import ChatMessage, Identity
from parchub.services.settings import AIProvider, ConfigurationState, StorageProvider
from tests.helpers import ManualScheduler


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def researcher() -> Identity:
    return Identity.human(id="u-1", name="Ada", email="ada@example.org", display_image_ref="ada.png")


@pytest.fixture
def members() -> list[Identity]:
    return [
        Identity.simulated(id="sim-1", name="Dr. Vega", persona_summary="Computational ecologist."),
        Identity.simulated(id="sim-2", name="Prof. Okoye", persona_summary="Studies soil microbiomes."),
    ]


@pytest.fixture
def sample_messages(researcher: Identity, members: list[Identity]) -> list[ChatMessage]:
    return [
        ChatMessage(id="m1", author=researcher, text="Hello everyone", timestamp="10:00"),
        ChatMessage(id="m2", author=members[0], text="Welcome, Ada!", timestamp="10:01"),
    ]


@pytest.fixture
def local_snapshot() -> ConfigurationState:
    return ConfigurationState(
        ai_provider=AIProvider.GEMINI,
        storage_provider=StorageProvider.LOCAL_STORAGE,
        storage_path="Docs/X",
    )
