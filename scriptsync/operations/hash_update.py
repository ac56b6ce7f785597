"""
Record the hashes of a finished batch in the hash cache
"""
from ..core.script import Script
from ..state.exemptions import ExemptionRegistry
from ..state.hash_cache import HashCacheStore
from ..utils.logging import vlog


def update_hash_values(scripts: list[Script], server: str,
                       store: HashCacheStore, registry: ExemptionRegistry):
    """
    Upsert name@server:last_sync_hash for every script that is neither
    exempt nor still conflicted.  A conflicted script must not be recorded
    as synchronized, or the next comparison would trust it.
    """
    entries: dict[str, str] = {}
    for script in scripts:
        if registry.is_exempt(script.name):
            continue
        if script.conflict is True:
            vlog(f"  [CACHE-SKIP] {script.name} still conflicted")
            continue
        if not script.last_sync_hash:
            continue
        entries[script.name] = script.last_sync_hash

    if entries:
        vlog(f"[cache] recording {len(entries)} hash(es) for {server}")
        store.update_all(server, entries)
