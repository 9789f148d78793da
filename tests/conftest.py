"""Shared fixtures for multi_uploader tests."""
import pytest

from multi_uploader.models import ImageArtifact
from multi_uploader.services.config import DictConfigProvider

from fakes import SleepRecorder


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def snapshot():
    return (ImageArtifact(file_name="cat.png", extension=".png", buffer=b"\x89PNG-cat"),)


@pytest.fixture
def host_config():
    return DictConfigProvider({"bed": {"current": "smms"}})
