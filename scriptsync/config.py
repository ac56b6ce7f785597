"""
Configuration constants for scriptsync
"""
import os
from pathlib import Path, PurePosixPath
from typing import Optional

import yaml

# ══════════════════════════════════════════════════════════════════════════════
#  DEFAULTS  ── overridden by YAML config or apply_profile()
# ══════════════════════════════════════════════════════════════════════════════

SSH_HOST = "example.com"
SSH_PORT = 22
SSH_USER = "root"
# Path to your private key, or None to use ssh-agent / ~/.ssh/id_*
SSH_KEY_PATH: Optional[str] = None
SSH_PASSWORD: Optional[str] = None  # only if you use password auth

# Server half of the script identity (name@server) in the hash cache.
# None means "use SSH_HOST".
SERVER_NAME: Optional[str] = None

LOCAL_ROOT = Path(".")
REMOTE_ROOT = PurePosixPath("/")

# Raw `force_upload` setting: names of scripts exempt from conflict checks.
# Validated by ExemptionRegistry.from_setting(), so it may hold anything here.
FORCE_UPLOAD: object = []

SCRIPT_SUFFIX = ".js"

CACHE_FILE = ".vscode-janus-debug"
COMPARE_FOLDER = ".compare"
COMPARE_FILE_PREFIX = "compare_"

PROJECT_FILE = ".scriptsync"

# Retry settings
RETRY_MAX = 5
RETRY_BASE_DELAY = 2.0  # seconds; doubles each attempt


class ConfigUnavailable(RuntimeError):
    """A setting needed for the current operation is missing or malformed."""


# ══════════════════════════════════════════════════════════════════════════════
#  DYNAMIC PATHS  ── computed from LOCAL_ROOT at call time
# ══════════════════════════════════════════════════════════════════════════════

def get_cache_file() -> Path:
    """Return the hash cache path based on the current LOCAL_ROOT."""
    return LOCAL_ROOT / CACHE_FILE


def get_compare_dir() -> Path:
    """Return the folder that receives downloaded remote copies."""
    return LOCAL_ROOT / COMPARE_FOLDER


def get_server_name() -> str:
    """Return the server identity used in name@server cache keys."""
    return SERVER_NAME or SSH_HOST


# ══════════════════════════════════════════════════════════════════════════════
#  GLOBAL CONFIG FILE  ── $XDG_CONFIG_HOME/scriptsync/config.yaml
# ══════════════════════════════════════════════════════════════════════════════

def get_global_config_dir() -> Path:
    """Return the global config directory for scriptsync."""
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg:
        return Path(xdg) / "scriptsync"
    if os.name == "nt":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "scriptsync"
    return Path.home() / ".config" / "scriptsync"


def load_global_config() -> dict:
    """Load global config; a missing or unreadable file yields {}."""
    cfg_path = get_global_config_dir() / "config.yaml"
    if not cfg_path.is_file():
        return {}
    try:
        with cfg_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


# ══════════════════════════════════════════════════════════════════════════════
#  PROJECT CONFIG FILE  ── .scriptsync (searched upward)
# ══════════════════════════════════════════════════════════════════════════════

def find_scriptsync(start: Optional[Path] = None) -> Optional[Path]:
    """
    Search upward from *start* (default: cwd) for a .scriptsync YAML file.
    Returns the Path if found, or None if no .scriptsync exists in any parent.
    """
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / PROJECT_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_scriptsync_file(path: Path) -> dict:
    """
    Parse a .scriptsync YAML file and return its contents as a dict.
    Raises ConfigUnavailable if it cannot be read, parsed or has the wrong shape.
    """
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigUnavailable(f"cannot read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigUnavailable(f"{path} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigUnavailable(f"{path} does not contain a YAML mapping")

    profiles = data.get("profiles")
    if profiles is not None and (
            not isinstance(profiles, list) or not all(isinstance(p, dict) for p in profiles)):
        raise ConfigUnavailable(f"{path}: profiles must be a list of mappings")
    defaults = data.get("defaults")
    if defaults is not None and not isinstance(defaults, dict):
        raise ConfigUnavailable(f"{path}: defaults must be a mapping")
    return data


def get_profile(data: dict, profile_name: str = "default") -> dict:
    """
    Extract a named profile from a .scriptsync or config.yaml data dict.
    Falls back to the first profile if the named one is not found.
    Returns a flat profile dict merged with top-level defaults.
    """
    defaults = data.get("defaults") or {}
    profiles = data.get("profiles") or []
    if not profiles:
        return dict(defaults)
    profile = next((p for p in profiles if p.get("name") == profile_name), None)
    if profile is None:
        profile = profiles[0]
    merged = dict(defaults)
    merged.update(profile)
    return merged


# ══════════════════════════════════════════════════════════════════════════════
#  APPLY PROFILE  ── mutates module-level variables
# ══════════════════════════════════════════════════════════════════════════════

def apply_profile(profile: dict):
    """
    Apply a profile dict to the module-level config variables.
    Supports keys: server, port, user, ssh_key, ssh_password, server_name,
                   local_root, remote_root, base_remote (prepended to
                   remote_root if remote_root is relative), force_upload.
    """
    global SSH_HOST, SSH_PORT, SSH_USER, SSH_KEY_PATH, SSH_PASSWORD
    global SERVER_NAME, LOCAL_ROOT, REMOTE_ROOT, FORCE_UPLOAD

    if "server" in profile:
        SSH_HOST = str(profile["server"])
    if "port" in profile:
        try:
            SSH_PORT = int(profile["port"])
        except (TypeError, ValueError) as exc:
            raise ConfigUnavailable(f"port must be a number, got {profile['port']!r}") from exc
    if "user" in profile:
        SSH_USER = str(profile["user"])
    elif "username" in profile:
        SSH_USER = str(profile["username"])
    if "ssh_key" in profile:
        SSH_KEY_PATH = str(profile["ssh_key"]) if profile["ssh_key"] else None
    if "ssh_password" in profile:
        SSH_PASSWORD = str(profile["ssh_password"]) if profile["ssh_password"] else None
    if "server_name" in profile:
        SERVER_NAME = str(profile["server_name"]) if profile["server_name"] else None
    if "local_root" in profile:
        LOCAL_ROOT = Path(profile["local_root"]).expanduser().resolve()
    if "remote_root" in profile:
        rr = str(profile["remote_root"])
        base = str(profile.get("base_remote", "")).rstrip("/")
        if base and not rr.startswith("/"):
            rr = f"{base}/{rr}"
        REMOTE_ROOT = PurePosixPath(rr)
    if "force_upload" in profile:
        # None (an empty YAML key) means "no exemptions"
        FORCE_UPLOAD = [] if profile["force_upload"] is None else profile["force_upload"]
