"""
Remote script service: hash, upload and download scripts on the server
"""
from pathlib import Path
from typing import Iterator

from .. import config as _cfg
from ..core.script import Script
from ..core.ssh_manager import SSHManager
from ..utils.file_utils import content_hash
from ..utils.logging import log, vlog


class RemoteScriptService:
    """Scripts live as <REMOTE_ROOT>/<name>.js on the SSH host."""

    def __init__(self, mgr: SSHManager):
        self.mgr = mgr

    @staticmethod
    def remote_path(name: str) -> str:
        return str(_cfg.REMOTE_ROOT / f"{name}{_cfg.SCRIPT_SUFFIX}")

    def check_conflicts(self, scripts: list[Script]):
        """
        Flag scripts whose server copy no longer matches the last synced hash.
        Exempt scripts and scripts without a stored hash are not compared;
        the latter stay unresolved anyway.  A script missing on the server
        cannot conflict.
        """
        for script in scripts:
            if not script.conflict_mode or not script.last_sync_hash:
                continue
            remote_md5 = self.mgr.md5_remote(self.remote_path(script.name))
            script.conflict = remote_md5 is not None and remote_md5 != script.last_sync_hash
            if script.conflict:
                vlog(f"  [CHANGED] {script.name}  cached {script.last_sync_hash[:8]}… "
                     f"server {remote_md5[:8]}…")

    def iter_upload(self, scripts: list[Script], dry_run: bool) -> Iterator[Script]:
        """
        Write each script's source to the server, yielding it once it is
        there.  The script's last_sync_hash becomes the hash of what was
        uploaded.  A transport error stops the iteration; scripts already
        yielded are on the server.
        """
        for script in scripts:
            target = self.remote_path(script.name)
            if dry_run:
                log(f"  [UPLOAD-DRY] {script.name} → {target}")
                continue
            self.mgr.sftp_write_text(target, script.source)
            script.last_sync_hash = content_hash(script.source)
            log(f"  [UPLOAD ✓] {script.name}")
            yield script

    def upload(self, scripts: list[Script], dry_run: bool) -> list[Script]:
        """Upload *scripts*; returns the ones actually uploaded, in order."""
        return list(self.iter_upload(scripts, dry_run))

    def download_compare_copy(self, name: str) -> Path:
        """
        Save the server copy of *name* as .compare/compare_<name>.js so it
        can be diffed against the local file.  Nothing is written remotely.
        """
        text = self.mgr.sftp_read_text(self.remote_path(name))
        compare_dir = _cfg.get_compare_dir()
        compare_dir.mkdir(parents=True, exist_ok=True)
        target = compare_dir / f"{_cfg.COMPARE_FILE_PREFIX}{name}{_cfg.SCRIPT_SUFFIX}"
        target.write_text(text, encoding="utf-8")
        log(f"  [COMPARE] {name} → {target}")
        return target
