"""
scriptsync  —  conflict-aware script upload over SSH
====================================================

Subcommands:
  init      Create a .scriptsync config file in the current directory.
  upload    Upload scripts, asking before overwriting changed server copies.
  status    Show tracked hashes and conflict exemptions for the server.
  compare   Download the server copy of a script for manual comparison.

Run 'scriptsync <subcommand> --help' for more details.
"""
import sys
import argparse
import traceback
from pathlib import Path

from scriptsync.utils.logging import warn


def _load_profile(args) -> dict:
    """Find the nearest .scriptsync, apply the requested profile, return it."""
    from scriptsync import config as _cfg

    scriptsync_path = _cfg.find_scriptsync()
    if scriptsync_path is None:
        print("error: no .scriptsync file found in this directory or any parent.", file=sys.stderr)
        print("Run 'scriptsync init' to create one.", file=sys.stderr)
        sys.exit(1)

    if args.verbose:
        print(f"[config] Using {scriptsync_path}")

    try:
        data = _cfg.load_scriptsync_file(scriptsync_path)
        profile = _cfg.get_profile(data, args.profile or "default")
        _cfg.apply_profile(profile)
    except _cfg.ConfigUnavailable as exc:
        warn(f"Cannot load {scriptsync_path}: {exc}")
        warn("Fix the file and retry.")
        sys.exit(1)
    return profile


# ── init ─────────────────────────────────────────────────────────────────────

def _yq(value: str) -> str:
    """Wrap a string in YAML single quotes, escaping embedded single quotes."""
    return "'" + value.replace("'", "''") + "'"


def cmd_init(args):
    """Create a .scriptsync profile file in the current directory."""
    from scriptsync import config as _cfg

    target = Path.cwd() / _cfg.PROJECT_FILE

    if target.exists() and not args.force:
        print(f"error: {_cfg.PROJECT_FILE} already exists in {Path.cwd()}", file=sys.stderr)
        print("Use --force to overwrite.", file=sys.stderr)
        sys.exit(1)

    g_defaults = _cfg.load_global_config().get("defaults") or {}

    local_root = str(Path(args.local or Path.cwd()).expanduser()).replace("\\", "/")

    remote_root = args.remote
    if not remote_root and sys.stdin.isatty():
        remote_root = input(f"Remote scripts folder [{Path.cwd().name}]: ").strip() or Path.cwd().name
    if not remote_root:
        print("error: remote path is required (--remote).", file=sys.stderr)
        sys.exit(1)

    server = args.server or g_defaults.get("server", "example.com")
    if not args.server and sys.stdin.isatty():
        server = input(f"Server hostname [{server}]: ").strip() or server

    user = args.user or g_defaults.get("user", "root")
    if not args.user and sys.stdin.isatty():
        user = input(f"SSH user [{user}]: ").strip() or user

    port = args.port or int(g_defaults.get("port", 22))
    base_remote = args.base_remote or g_defaults.get("base_remote", "")
    profile_name = args.profile or "default"

    lines = [
        "# .scriptsync — scriptsync project configuration",
        "#",
        "# profiles: list of upload targets for this project.",
        "# remote_root is relative to defaults.base_remote when it does not start with '/'.",
        "# force_upload: script names that are never checked for server-side changes.",
        "profiles:",
        f"  - name: {profile_name}",
        f"    server: {_yq(server)}",
        f"    port: {port}",
        f"    user: {_yq(user)}",
        f"    local_root: {_yq(local_root)}",
        f"    remote_root: {_yq(remote_root)}",
        "    force_upload: []",
    ]
    if base_remote:
        lines += [
            "defaults:",
            f"  base_remote: {_yq(base_remote)}",
        ]
    content = "\n".join(lines) + "\n"

    if args.dry_run:
        print(f"[dry-run] Would write {target}:")
        print(content)
        return

    target.write_text(content, encoding="utf-8")
    print(f"Created {target}")
    if args.verbose:
        print(content)


# ── upload ───────────────────────────────────────────────────────────────────

def cmd_upload(args):
    """Upload scripts using the nearest .scriptsync config file."""
    from scriptsync.core.upload_engine import run_upload

    _load_profile(args)
    paths = [Path(p).expanduser().resolve() for p in args.paths] or None
    ok = run_upload(paths, dry_run=args.dry_run, verbose=args.verbose)
    if not ok:
        sys.exit(1)


# ── status ────────────────────────────────────────────────────────────────────

def cmd_status(args):
    """Show tracked hashes and exemptions for the configured server."""
    import scriptsync.config as _cfg
    from scriptsync.state.exemptions import ExemptionRegistry
    from scriptsync.state.hash_cache import HashCacheStore

    profile = _load_profile(args)
    server = _cfg.get_server_name()
    tracked = HashCacheStore(_cfg.get_cache_file()).read(server)

    print(f"\nProfile : {profile.get('name', 'default')}")
    print(f"Local   : {_cfg.LOCAL_ROOT}")
    print(f"Remote  : {_cfg.SSH_USER}@{_cfg.SSH_HOST}:{_cfg.SSH_PORT}:{_cfg.REMOTE_ROOT}")
    print(f"Tracked : {len(tracked)} script(s) for {server}")
    if args.verbose:
        for name in sorted(tracked):
            print(f"    {name}  {tracked[name]}")

    try:
        registry = ExemptionRegistry.from_setting(_cfg.FORCE_UPLOAD)
    except _cfg.ConfigUnavailable as exc:
        warn(f"Cannot read conflict exemptions: {exc}")
        warn("Uploads will be refused until force_upload is fixed.")
        return
    if registry.names:
        print(f"Exempt  : {', '.join(registry.names)}")


# ── compare ───────────────────────────────────────────────────────────────────

def cmd_compare(args):
    """Download the server copy of a script next to the local tree."""
    from scriptsync.core.ssh_manager import SSHManager
    from scriptsync.operations.transfer import RemoteScriptService
    from scriptsync.utils.logging import set_verbose, is_verbose

    _load_profile(args)
    set_verbose(args.verbose)
    name = Path(args.name).stem

    try:
        with SSHManager() as mgr:
            target = RemoteScriptService(mgr).download_compare_copy(name)
    except FileNotFoundError:
        print(f"error: {name} does not exist on the server.", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print()
        warn("Interrupted by user.")
        sys.exit(1)
    except Exception as exc:
        warn(f"Compare failed: {exc}")
        if is_verbose():
            traceback.print_exc()
        sys.exit(1)
    print(target)


# ── main ──────────────────────────────────────────────────────────────────────

def main():
    """CLI entry point for scriptsync"""
    parser = argparse.ArgumentParser(
        prog="scriptsync",
        description="Conflict-aware script upload over SSH",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # ── init ──────────────────────────────────────────────────────────────────
    init_p = subparsers.add_parser(
        "init",
        help="Create a .scriptsync config file in the current directory",
        description="Create a .scriptsync YAML config file for this project.",
    )
    init_p.add_argument("--local", metavar="PATH",
                        help="Local scripts folder (default: current directory)")
    init_p.add_argument("--remote", metavar="PATH",
                        help="Remote scripts folder (relative to base_remote or absolute)")
    init_p.add_argument("--server", metavar="HOST",
                        help="Remote server hostname or IP")
    init_p.add_argument("--user", metavar="NAME",
                        help="SSH username (default: root)")
    init_p.add_argument("--port", type=int, metavar="N",
                        help="SSH port (default: 22)")
    init_p.add_argument("--base-remote", metavar="PATH",
                        help="Base remote path prepended to relative remote roots")
    init_p.add_argument("--profile", metavar="NAME", default="default",
                        help="Profile name to create (default: default)")
    init_p.add_argument("--force", action="store_true",
                        help="Overwrite existing .scriptsync")
    init_p.add_argument("-n", "--dry-run", action="store_true",
                        help="Preview without writing files")
    init_p.add_argument("-v", "--verbose", action="store_true",
                        help="Show extra output")

    # ── upload ────────────────────────────────────────────────────────────────
    upload_p = subparsers.add_parser(
        "upload",
        help="Upload scripts, asking before overwriting changed server copies",
        description="Upload .js scripts (files or folders; default: local_root).",
    )
    upload_p.add_argument("paths", nargs="*", metavar="PATH",
                          help="Script files or folders to upload")
    upload_p.add_argument("--profile", metavar="NAME", default="default",
                          help="Profile to use (default: default)")
    upload_p.add_argument("-n", "--dry-run", action="store_true",
                          help="Ask about conflicts but upload and record nothing")
    upload_p.add_argument("-v", "--verbose", action="store_true",
                          help="Show every script, not just actions")

    # ── status ────────────────────────────────────────────────────────────────
    status_p = subparsers.add_parser(
        "status",
        help="Show tracked hashes and conflict exemptions",
        description="Show hash cache status for the nearest .scriptsync config.",
    )
    status_p.add_argument("--profile", metavar="NAME", default="default",
                          help="Profile to use (default: default)")
    status_p.add_argument("-v", "--verbose", action="store_true",
                          help="List every tracked script")

    # ── compare ───────────────────────────────────────────────────────────────
    compare_p = subparsers.add_parser(
        "compare",
        help="Download the server copy of a script into .compare/",
        description="Save the server copy as .compare/compare_<name>.js for diffing.",
    )
    compare_p.add_argument("name", metavar="NAME",
                           help="Script name or path")
    compare_p.add_argument("--profile", metavar="NAME", default="default",
                           help="Profile to use (default: default)")
    compare_p.add_argument("-v", "--verbose", action="store_true",
                           help="Show extra output")

    args = parser.parse_args()

    if args.command == "init":
        cmd_init(args)
    elif args.command == "upload":
        cmd_upload(args)
    elif args.command == "status":
        cmd_status(args)
    elif args.command == "compare":
        cmd_compare(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
