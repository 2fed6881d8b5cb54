"""Shared fixtures."""

import pytest

from fakes import VTT, FakeClock
from videofactory.storage import ArtifactStore


@pytest.fixture
def store(tmp_path) -> ArtifactStore:
    return ArtifactStore(tmp_path)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def vtt() -> str:
    return VTT
