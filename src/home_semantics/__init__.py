"""home-semantics: semantic tag classification for home-automation items."""

__version__ = "0.1.0"
