"""Short-form content generator: topic in, script/voiceover/video/thumbnail/posts out."""

__version__ = "0.1.0"
