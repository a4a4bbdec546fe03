"""Tests for the request boundary."""

from unittest.mock import Mock

import pytest

from reelgen.api import handle_generate
from reelgen.config import Capabilities
from reelgen.pipeline import Orchestrator, PlatformPackager


@pytest.mark.unit
def test_success_returns_camel_case_body(offline_orchestrator):
    status, body = handle_generate(
        {"topic": "Home espresso", "platforms": ["tiktok"]}, orchestrator=offline_orchestrator
    )

    assert status == 200
    assert body["socialPosts"][0]["platform"] == "tiktok"
    assert body["voiceover"]["format"] == "wav"
    assert body["workflowNotes"]


@pytest.mark.unit
@pytest.mark.parametrize("payload", [{}, {"topic": ""}, {"topic": 7}, "espresso"])
def test_invalid_request_is_400(offline_orchestrator, payload):
    status, body = handle_generate(payload, orchestrator=offline_orchestrator)

    assert status == 400
    assert body == {"error": "Invalid request. Provide a topic string."}


@pytest.mark.unit
def test_unknown_platform_is_400(offline_orchestrator):
    status, body = handle_generate(
        {"topic": "Home espresso", "platforms": ["friendster"]}, orchestrator=offline_orchestrator
    )

    assert status == 400
    assert "platforms" in body["error"]


@pytest.mark.unit
def test_internal_failure_is_500(test_config, stub_video):
    packager = Mock(spec=PlatformPackager)
    packager.package.side_effect = KeyError("profile")
    orchestrator = Orchestrator(Capabilities.none(), test_config, video=stub_video, packager=packager)

    status, body = handle_generate({"topic": "Home espresso"}, orchestrator=orchestrator)

    assert status == 500
    assert body["error"]
