"""
Upload engine - conflict checks and orchestration for one batch
"""
import traceback
from pathlib import Path
from typing import Iterable, Optional

from .. import config as _cfg
from ..config import ConfigUnavailable
from ..core.ssh_manager import SSHManager
from ..operations.conflict import ensure_force_upload
from ..operations.hash_update import update_hash_values
from ..operations.prompt import Prompt, console_prompt
from ..operations.scanner import collect_scripts
from ..operations.transfer import RemoteScriptService
from ..state.exemptions import ExemptionRegistry
from ..state.hash_cache import HashCacheStore
from ..utils.logging import log, warn, set_verbose, is_verbose


def upload_batch(scripts, service: RemoteScriptService, store: HashCacheStore,
                 registry: ExemptionRegistry, server: str, prompt: Prompt,
                 dry_run: bool = False) -> dict:
    """
    Run one batch through annotate → check → resolve → upload → record.

    Returns a summary:
      {"no_conflict": [...], "forced": [...], "skipped": [...], "uploaded": [...]}
    with script names in input order.
    """
    registry.annotate(scripts, store, server)
    service.check_conflicts(scripts)

    n_conf = sum(1 for s in scripts if s.conflict_mode and s.unresolved)
    log(f"[conflict] {len(scripts)} script(s), {n_conf} need a decision")

    no_conflict, force_upload = ensure_force_upload(scripts, prompt)
    approved = {id(s) for s in no_conflict} | {id(s) for s in force_upload}
    to_upload = [s for s in scripts if id(s) in approved]

    uploaded = []
    try:
        if to_upload:
            log(f"[upload] Uploading {len(to_upload)} script(s) …")
            for script in service.iter_upload(to_upload, dry_run):
                uploaded.append(script)
    finally:
        # record whatever made it to the server, even if a later upload failed
        if not dry_run and uploaded:
            update_hash_values(uploaded, server, store, registry)

    return {
        "no_conflict": [s.name for s in no_conflict],
        "forced": [s.name for s in force_upload],
        "skipped": [s.name for s in scripts if id(s) not in approved],
        "uploaded": [s.name for s in uploaded],
    }


def run_upload(paths: Optional[Iterable[Path]] = None, dry_run: bool = False,
               verbose: bool = False, prompt: Prompt = console_prompt) -> bool:
    """
    Upload local scripts to the configured server, asking before any
    script that may have changed there is overwritten.
    Returns False when the run was abandoned or failed.
    """
    set_verbose(verbose)
    server = _cfg.get_server_name()

    print(f"\n{'=' * 64}")
    print(f"  Upload  {_cfg.LOCAL_ROOT}")
    print(f"   →   {_cfg.SSH_USER}@{_cfg.SSH_HOST}:{_cfg.SSH_PORT}:{_cfg.REMOTE_ROOT}")
    print(f"{'=' * 64}")
    if dry_run:
        print("  *** DRY-RUN — nothing will be uploaded or recorded ***")
    print()

    try:
        registry = ExemptionRegistry.from_setting(_cfg.FORCE_UPLOAD)
    except ConfigUnavailable as exc:
        warn(f"Cannot read conflict exemptions: {exc}")
        warn("Upload abandoned — fix force_upload in .scriptsync and retry.")
        return False

    scripts = collect_scripts(paths)
    if not scripts:
        log("[upload] No scripts found — nothing to do.")
        return True
    log(f"[scan] {len(scripts)} local script(s) queued")

    store = HashCacheStore(_cfg.get_cache_file())

    try:
        with SSHManager() as mgr:
            summary = upload_batch(scripts, RemoteScriptService(mgr), store,
                                   registry, server, prompt, dry_run)
    except KeyboardInterrupt:
        print()
        warn("Interrupted by user.")
        return False
    except Exception as exc:
        warn(f"Upload failed: {exc}")
        if is_verbose():
            traceback.print_exc()
        return False

    print()
    print(f"{'─' * 64}")
    print(" SUMMARY")
    print(f"  No conflict : {len(summary['no_conflict'])}")
    print(f"  Forced      : {len(summary['forced'])}")
    print(f"  Skipped     : {len(summary['skipped'])}")
    print(f"  Uploaded    : {len(summary['uploaded'])}")
    print(f"{'─' * 64}")

    if summary["skipped"]:
        print()
        print("⚠  Not uploaded: " + ", ".join(summary["skipped"]))
        print("   Run 'scriptsync compare <name>' to inspect the server copy.")
    return True
