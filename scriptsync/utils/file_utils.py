"""
File utilities (hashing, atomic writes)
"""
import hashlib
import os
import tempfile
from pathlib import Path


def content_hash(source: str) -> str:
    """MD5 hex digest of script source, as stored in the hash cache."""
    return hashlib.md5(source.encode("utf-8")).hexdigest()


def atomic_write_text(path: Path, text: str):
    """
    Replace *path* with *text* in one step: write a sibling temp file,
    then os.replace() it over the target.  Raises OSError on failure;
    the target is left untouched in that case.
    """
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp",
                                    dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
