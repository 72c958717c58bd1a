"""Live state: the resolved semantic metadata cache."""

from home_semantics.state.metadata_cache import SemanticsMetadataCache

__all__ = ["SemanticsMetadataCache"]
