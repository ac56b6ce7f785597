"""
Script record passed through one upload batch
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class Script:
    """
    One local script queued for upload.

    Flags:
      conflict       the remote copy may differ from what we last synced
      conflict_mode  False when the name is exempt from conflict checks
      force_upload   set once the user (or a remembered answer) approved
                     overwriting the remote copy
    """

    name: str
    path: Optional[Path] = None
    source: str = ""
    last_sync_hash: Optional[str] = None
    conflict: bool = False
    conflict_mode: bool = True
    force_upload: bool = False

    @property
    def unresolved(self) -> bool:
        """
        True when a decision is needed before upload: divergence is known,
        or there is no stored hash to compare against.
        """
        return self.conflict or not self.last_sync_hash
