"""Shared pytest fixtures for reelgen tests."""

from unittest.mock import Mock

import pytest

from reelgen.config import Capabilities, Config
from reelgen.models import MediaAsset, Scene, Script, StageOutcome
from reelgen.pipeline import Orchestrator, VideoComposer
from reelgen.retry import RetryPolicy


@pytest.fixture
def test_config() -> Config:
    """Configuration with no credentials and no retry delay."""
    return Config(
        anthropic_api_key="",
        openai_api_key="",
        google_cloud_project="",
        veo_output_bucket="",
        max_attempts=2,
        retry_delay=0.0,
    )


@pytest.fixture
def no_retry_delay() -> RetryPolicy:
    """Two attempts, no sleeping between them."""
    return RetryPolicy(max_attempts=2, base_delay=0.0)


@pytest.fixture
def sample_script() -> Script:
    """Small hand-written script."""
    return Script(
        hook="Morning routines can make or break your day.",
        scenes=[
            Scene(
                id="scene_1",
                title="Wake up",
                narration="Skip the snooze button and get up the moment your alarm goes off.",
                visual_idea="Hand switching off an alarm clock at sunrise",
            ),
            Scene(
                id="scene_2",
                title="Move",
                narration="Five minutes of stretching wakes your body faster than coffee.",
                visual_idea="Person stretching beside a bright window",
            ),
        ],
        closing="Try it tomorrow. Follow for more quick breakdowns.",
        keywords=["morning", "routines", "productivity", "habits"],
    )


@pytest.fixture
def stub_video() -> Mock:
    """VideoComposer stand-in that skips ffmpeg encoding."""
    mock = Mock(spec=VideoComposer)
    mock.run = Mock(
        return_value=StageOutcome.fallback(MediaAsset.from_bytes("mp4", b"\x00\x00\x00\x18ftypmp42"))
    )
    return mock


@pytest.fixture
def offline_orchestrator(test_config, stub_video) -> Orchestrator:
    """Orchestrator with every collaborator disabled and a stubbed video stage."""
    return Orchestrator(Capabilities.none(), test_config, video=stub_video)


@pytest.fixture
def mock_anthropic_client() -> Mock:
    """Mock AnthropicClient for testing."""
    mock = Mock()
    mock.model = "claude-test"
    mock.create_message = Mock()
    return mock


@pytest.fixture
def mock_speech_client() -> Mock:
    """Mock SpeechClient for testing."""
    mock = Mock()
    mock.synthesize = Mock()
    return mock


@pytest.fixture
def mock_imagen_client() -> Mock:
    """Mock ImagenClient for testing."""
    mock = Mock()
    mock.generate_image = Mock()
    return mock


@pytest.fixture
def mock_veo_client() -> Mock:
    """Mock VeoClient for testing."""
    mock = Mock()
    mock.generate_clip = Mock()
    return mock
