"""State management (hash cache and conflict exemptions)"""
from .hash_cache import HashCacheStore
from .exemptions import ExemptionRegistry

__all__ = ["HashCacheStore", "ExemptionRegistry"]
