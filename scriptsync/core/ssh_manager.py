"""
SSH connection manager with auto-reconnect and keep-alive
"""
import shlex
from typing import Optional

import paramiko

from .. import config as _cfg
from ..utils.logging import log, vlog
from ..utils.retry import retried


class SSHManager:
    """
    Wraps paramiko SSHClient + SFTPClient for reading and writing the
    scripts under REMOTE_ROOT.  Reconnects on demand and sends keep-alives.
    """

    def __init__(self):
        self._ssh: Optional[paramiko.SSHClient] = None
        self._sftp: Optional[paramiko.SFTPClient] = None

    def __enter__(self) -> "SSHManager":
        self.connect()
        return self

    def __exit__(self, *exc_info):
        self.disconnect()

    # ── connection ─────────────────────────────────────────────────────────

    def connect(self):
        if self._ssh:
            try:
                self._ssh.get_transport().send_ignore()  # test if alive
                return
            except (AttributeError, paramiko.SSHException, OSError):
                self._close_quietly()

        log(f"[SSH] connecting to {_cfg.SSH_USER}@{_cfg.SSH_HOST}:{_cfg.SSH_PORT} …")
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        kw: dict = dict(hostname=_cfg.SSH_HOST, port=_cfg.SSH_PORT, username=_cfg.SSH_USER,
                        timeout=20, banner_timeout=30, auth_timeout=30)
        if _cfg.SSH_KEY_PATH:
            kw["key_filename"] = _cfg.SSH_KEY_PATH
        if _cfg.SSH_PASSWORD:
            kw["password"] = _cfg.SSH_PASSWORD

        client.connect(**kw)
        client.get_transport().set_keepalive(30)

        self._ssh = client
        self._sftp = client.open_sftp()
        log("[SSH] connected ✓")

    def _close_quietly(self):
        for handle in (self._sftp, self._ssh):
            if handle is None:
                continue
            try:
                handle.close()
            except (paramiko.SSHException, OSError):
                pass
        self._ssh = None
        self._sftp = None

    def disconnect(self):
        self._close_quietly()
        vlog("[SSH] disconnected.")

    def ensure_connected(self):
        """Call before any remote operation."""
        if self._ssh is not None:
            transport = self._ssh.get_transport()
            if transport is not None and transport.is_active():
                return
        self.connect()

    # ── raw exec ────────────────────────────────────────────────────────────

    @retried
    def exec(self, cmd: str, timeout: int = 30) -> tuple[str, str]:
        """Run a command; return (stdout, stderr). Raises on non-zero exit."""
        self.ensure_connected()
        _, stdout, stderr = self._ssh.exec_command(cmd, timeout=timeout)
        out = stdout.read().decode("utf-8", errors="replace")
        err = stderr.read().decode("utf-8", errors="replace")
        rc = stdout.channel.recv_exit_status()
        if rc != 0:
            raise RuntimeError(f"remote command exited {rc}: {cmd!r}\nstderr: {err.strip()}")
        return out, err

    # ── sftp ops ────────────────────────────────────────────────────────────

    @retried
    def sftp_stat(self, remote: str):
        self.ensure_connected()
        return self._sftp.stat(remote)

    def sftp_exists(self, remote: str) -> bool:
        try:
            self.sftp_stat(remote)
            return True
        except FileNotFoundError:
            return False

    @retried
    def sftp_read_text(self, remote: str) -> str:
        self.ensure_connected()
        with self._sftp.open(remote, "r") as f:
            return f.read().decode("utf-8", errors="replace")

    @retried
    def sftp_write_text(self, remote: str, text: str):
        self.ensure_connected()
        with self._sftp.open(remote, "w") as f:
            f.write(text.encode("utf-8"))

    def md5_remote(self, remote: str) -> Optional[str]:
        """MD5 hex digest of a remote file, or None if it does not exist."""
        if not self.sftp_exists(remote):
            return None
        out, _ = self.exec(f"md5sum {shlex.quote(remote)}", timeout=30)
        # md5sum output: "<hash>  <filename>"
        return out.strip().split()[0]
