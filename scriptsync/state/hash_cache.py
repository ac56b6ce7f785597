"""
Hash cache file management (persistent across runs)

On-disk format, one record per line, no trailing blank line:

    <name>@<server>:<md5>

The file is shared by every server a workspace talks to; each store call is
scoped to one server and leaves the other servers' lines where they are.
"""
from pathlib import Path
from typing import Optional

from ..utils.file_utils import atomic_write_text
from ..utils.logging import vlog


def _parse_line(line: str) -> Optional[tuple[str, str, str]]:
    """Split 'name@server:hash' into (name, server, hash); None if malformed."""
    identity, sep, digest = line.strip().rpartition(":")
    if not sep or not digest:
        return None
    name, sep, server = identity.rpartition("@")
    if not sep or not name or not server:
        return None
    return name, server, digest


class HashCacheStore:
    """
    Durable map from script identity (name@server) to the content hash of
    the last synchronized version.

    Reads never fail: a missing file is created empty, anything unreadable
    is treated as an empty cache.  Writes never raise: a failed write is
    dropped and the next batch simply asks again.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    # ── raw file access ─────────────────────────────────────────────────────

    def _load_lines(self) -> list[str]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            try:
                self.path.write_text("", encoding="utf-8")
            except OSError as exc:
                vlog(f"[cache] could not create {self.path}: {exc}")
            return []
        except (OSError, UnicodeDecodeError) as exc:
            vlog(f"[cache] unreadable {self.path}, treating as empty: {exc}")
            return []
        return [line.strip() for line in text.strip().split("\n") if line.strip()]

    # ── public API ──────────────────────────────────────────────────────────

    def read(self, server: str) -> dict[str, str]:
        """Return {name: hash} for *server*."""
        result: dict[str, str] = {}
        for line in self._load_lines():
            parsed = _parse_line(line)
            if parsed is None:
                continue
            name, srv, digest = parsed
            if srv == server:
                result[name] = digest
        return result

    def write_all(self, server: str, mapping: dict[str, str]):
        """
        Make *mapping* the complete set of entries for *server*.
        Existing identities keep their line position, new ones are appended,
        entries of other servers are preserved untouched.
        """
        pending = dict(mapping)
        out: list[str] = []
        for line in self._load_lines():
            parsed = _parse_line(line)
            if parsed is None:
                continue
            name, srv, _ = parsed
            if srv != server:
                out.append(line)
            elif name in pending:
                out.append(f"{name}@{server}:{pending.pop(name)}")
            # else: entry dropped from this server's mapping
        for name, digest in pending.items():
            out.append(f"{name}@{server}:{digest}")

        try:
            atomic_write_text(self.path, "\n".join(out).strip())
        except OSError as exc:
            vlog(f"[cache] write to {self.path} failed, dropped: {exc}")

    def update_all(self, server: str, new_entries: dict[str, str]):
        """Merge *new_entries* into the stored entries (last writer wins)."""
        if not new_entries:
            return
        merged = self.read(server)
        merged.update(new_entries)
        self.write_all(server, merged)
