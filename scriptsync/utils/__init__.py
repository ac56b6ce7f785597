"""Utilities (logging, retry, file utilities)"""
from .logging import log, vlog, warn, set_verbose, is_verbose
from .retry import retried
from .file_utils import content_hash, atomic_write_text

__all__ = [
    "log", "vlog", "warn", "set_verbose", "is_verbose",
    "retried",
    "content_hash", "atomic_write_text",
]
