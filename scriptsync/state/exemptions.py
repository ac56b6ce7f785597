"""
Conflict exemptions: script names that are always uploaded without a check
"""
from typing import Iterable

from ..config import ConfigUnavailable
from ..core.script import Script
from ..utils.logging import vlog
from .hash_cache import HashCacheStore


class ExemptionRegistry:
    """Read-only view of the `force_upload` setting."""

    def __init__(self, names: Iterable[str] = ()):
        self._names = list(names)

    @classmethod
    def from_setting(cls, value) -> "ExemptionRegistry":
        """
        Build a registry from the raw setting value.
        Raises ConfigUnavailable unless it is a list of strings.
        """
        if value is None:
            return cls()
        if not isinstance(value, list) or not all(isinstance(n, str) for n in value):
            raise ConfigUnavailable(
                f"force_upload must be a list of script names, got {value!r}"
            )
        return cls(value)

    @property
    def names(self) -> list[str]:
        return list(self._names)

    def is_exempt(self, name: str) -> bool:
        return name in self._names

    def annotate(self, scripts: list[Script], store: HashCacheStore, server: str):
        """
        Prepare a batch for conflict resolution: exempt scripts leave
        conflict mode, all others get their last synced hash from *store*.
        """
        if not scripts:
            return
        hashes = store.read(server)
        for script in scripts:
            if self.is_exempt(script.name):
                script.conflict_mode = False
                vlog(f"  [EXEMPT] {script.name}")
            else:
                script.last_sync_hash = hashes.get(script.name)
                if script.last_sync_hash is None:
                    vlog(f"  [NO-HASH] {script.name}")
