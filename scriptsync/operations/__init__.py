"""Operations (scan, conflict resolution, hash updates, transfer)"""
from .scanner import collect_scripts
from .conflict import BatchPolicy, Decision, resolve, ensure_force_upload
from .hash_update import update_hash_values
from .prompt import Prompt, console_prompt
from .transfer import RemoteScriptService

__all__ = [
    "collect_scripts",
    "BatchPolicy", "Decision", "resolve", "ensure_force_upload",
    "update_hash_values",
    "Prompt", "console_prompt",
    "RemoteScriptService",
]
