from __future__ import annotations

import sys
from pathlib import Path

import pytest

SRC_ROOT = (Path(__file__).resolve().parents[1] / "src").as_posix()
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from chatlog_studio.config import StyleConfig  # noqa: E402

DATA_DIR = Path(__file__).parent


@pytest.fixture
def config() -> StyleConfig:
    return StyleConfig()


@pytest.fixture
def sample_transcript() -> Path:
    return DATA_DIR / "sample_transcript.txt"


@pytest.fixture
def sample_blocks_json() -> Path:
    return DATA_DIR / "sample_blocks.json"


@pytest.fixture
def sample_config_json() -> Path:
    return DATA_DIR / "sample_config.json"
