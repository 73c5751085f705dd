from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_project_root_on_path() -> None:
    """Guarantee the repository root is discoverable for absolute imports."""

    root = Path(__file__).resolve().parent.parent
    root_str = str(root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)


_ensure_project_root_on_path()

from midi_stream.config import DecoderConfig, reset_decoder_config_cache  # noqa: E402

from tests.helpers import sample_file  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_decoder_config():
    """Make sure every test sees the bundled defaults."""

    reset_decoder_config_cache()
    yield
    reset_decoder_config_cache()


@pytest.fixture
def sample_bytes() -> bytes:
    return sample_file()


@pytest.fixture
def lenient_config() -> DecoderConfig:
    return DecoderConfig(missing_end_of_track="synthesize")
