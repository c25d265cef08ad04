import pytest

from .helpers import RecordingSleep


@pytest.fixture
def output_path(tmp_path):
    return str(tmp_path / "out" / "recording.ts")


@pytest.fixture
def fake_sleep():
    return RecordingSleep()
