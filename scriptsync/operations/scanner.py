"""
Local script discovery
"""
from pathlib import Path
from typing import Iterable, Optional

from .. import config as _cfg
from ..core.script import Script
from ..utils.logging import vlog, warn


def _script_from_file(path: Path) -> Optional[Script]:
    """Read a script exactly as stored (no newline translation); None if unreadable."""
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            source = f.read()
    except UnicodeDecodeError as exc:
        warn(f"Skipping {path}: not valid UTF-8 ({exc.reason} at byte {exc.start})")
        return None
    except OSError as exc:
        warn(f"Skipping {path}: {exc}")
        return None
    return Script(name=path.stem, path=path, source=source)


def collect_scripts(paths: Optional[Iterable[Path]] = None,
                    root: Optional[Path] = None) -> list[Script]:
    """
    Build Script records for upload.

    Each entry of *paths* is a script file or a folder; folders contribute
    their own *.js files (not sub-folders), sorted by name.  Without paths
    the local root is used.  A name seen twice is only queued once.
    """
    targets = list(paths) if paths else [root or _cfg.LOCAL_ROOT]
    scripts: list[Script] = []
    seen: set[str] = set()

    for target in targets:
        target = Path(target)
        if target.is_dir():
            files = sorted(p for p in target.iterdir()
                           if p.is_file() and p.suffix == _cfg.SCRIPT_SUFFIX)
        elif target.is_file() and target.suffix == _cfg.SCRIPT_SUFFIX:
            files = [target]
        else:
            vlog(f"  [IGNORE] {target} (not a {_cfg.SCRIPT_SUFFIX} file or folder)")
            continue

        for f in files:
            if f.stem in seen:
                vlog(f"  [DUPLICATE] {f} (already queued as {f.stem})")
                continue
            script = _script_from_file(f)
            if script is None:
                continue
            seen.add(f.stem)
            scripts.append(script)

    return scripts
