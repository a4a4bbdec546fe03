"""Unit tests for PlatformPackager."""

import pytest

from reelgen.models import Platform
from reelgen.pipeline import PlatformPackager
from reelgen.pipeline.packager import PROFILES, build_caption, build_hashtags


class TestPackage:
    """Tests for per-platform post assembly."""

    @pytest.mark.unit
    def test_default_is_all_four_in_order(self, sample_script):
        posts = PlatformPackager().package(sample_script)

        assert [p.platform for p in posts] == ["youtube", "tiktok", "reels", "instagram"]

    @pytest.mark.unit
    def test_duplicates_collapse_to_first_occurrence(self, sample_script):
        posts = PlatformPackager().package(sample_script, ["youtube", "youtube", "tiktok"])

        assert [p.platform for p in posts] == ["youtube", "tiktok"]

    @pytest.mark.unit
    def test_requested_order_is_kept(self, sample_script):
        posts = PlatformPackager().package(sample_script, [Platform.INSTAGRAM, Platform.TIKTOK])

        assert [p.platform for p in posts] == ["instagram", "tiktok"]

    @pytest.mark.unit
    def test_unknown_platform_raises(self, sample_script):
        with pytest.raises(ValueError):
            PlatformPackager().package(sample_script, ["myspace"])

    @pytest.mark.unit
    def test_every_post_is_complete(self, sample_script):
        for post in PlatformPackager().package(sample_script, call_to_action="Follow for more"):
            profile = PROFILES[Platform(post.platform)]
            assert post.headline
            assert len(post.headline) <= profile.headline_limit
            assert post.caption
            assert post.schedule_hint == profile.schedule_hint
            assert 1 <= len(post.hashtags) <= profile.max_tags
            assert all(tag.startswith("#") for tag in post.hashtags)

    @pytest.mark.unit
    def test_platform_flavour(self, sample_script):
        posts = {p.platform: p for p in PlatformPackager().package(sample_script)}

        assert posts["youtube"].hashtags[0] == "#Shorts"
        assert "#Morning" in posts["youtube"].hashtags
        assert posts["tiktok"].hashtags[:2] == ["#fyp", "#foryou"]
        assert "#morning" in posts["tiktok"].hashtags
        assert "#morningroutines" in posts["reels"].hashtags
        assert posts["instagram"].caption.endswith("Link in bio.")
        assert posts["reels"].caption.endswith("Save this for later.")


@pytest.mark.unit
def test_hashtags_unique_ignoring_case():
    tags = build_hashtags(["Coffee", "coffee", "brew"], PROFILES[Platform.TIKTOK])

    assert tags == ["#fyp", "#foryou", "#coffee", "#brew"]


@pytest.mark.unit
def test_hashtags_capped():
    keywords = [f"word{i}" for i in range(20)]

    assert len(build_hashtags(keywords, PROFILES[Platform.YOUTUBE])) == 5


@pytest.mark.unit
def test_caption_skips_cta_already_in_closing(sample_script):
    caption = build_caption(sample_script, "Follow for more quick breakdowns", "")

    assert caption == sample_script.closing


@pytest.mark.unit
def test_caption_appends_new_cta(sample_script):
    caption = build_caption(sample_script, "Grab the checklist", "Link in bio.")

    assert caption.endswith("Grab the checklist. Link in bio.")
