"""Unit tests for configuration and capabilities."""

import pytest

from reelgen.config import Capabilities, Config


@pytest.mark.unit
def test_capabilities_follow_credentials():
    cfg = Config(
        anthropic_api_key="sk-ant",
        openai_api_key="",
        google_cloud_project="demo",
        enable_veo=False,
    )

    assert cfg.capabilities() == Capabilities(script=True, speech=False, video=False, image=True)


@pytest.mark.unit
def test_veo_needs_project_and_flag():
    assert Config(google_cloud_project="demo", enable_veo=True).capabilities().video
    assert not Config(google_cloud_project="", enable_veo=True).capabilities().video


@pytest.mark.unit
def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("REELGEN_ENABLE_VEO", "off")
    monkeypatch.setenv("REELGEN_MAX_ATTEMPTS", "4")
    monkeypatch.setenv("REELGEN_TTS_VOICE", "nova")

    cfg = Config()

    assert cfg.enable_veo is False
    assert cfg.max_attempts == 4
    assert cfg.tts_voice == "nova"


@pytest.mark.unit
def test_describe_lists_every_collaborator():
    assert Capabilities.none().describe() == {
        "script": False,
        "speech": False,
        "video": False,
        "image": False,
    }
