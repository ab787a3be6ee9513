"""
Diagnostics CLI for the local settings and log stores.

Usage:
    autoglm-store logs size                 # Total size of log files
    autoglm-store logs export [--out DIR]   # Zip logs + device info
    autoglm-store logs clear                # Delete all log files
    autoglm-store profiles list             # Saved profiles, keys masked
    autoglm-store import-dev FILE           # One-time dev profile import

Reads AUTOGLM_DATA_DIR (default ~/.autoglm) unless --data-dir is given.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from .app import AppContext
from .enums import ImportStatus
from .settings.crypto import mask_api_key


def cmd_logs(ctx: AppContext, args: argparse.Namespace) -> int:
    store = ctx.log_store

    if args.action == "size":
        files = store.log_files()
        print(f"{len(files)} log files, {store.format_size(store.total_size())}")
        for f in files:
            print(f"  {f.name:<45} {store.format_size(f.stat().st_size):>10}")
        return 0

    if args.action == "export":
        archive = store.export(Path(args.out) if args.out else None)
        if archive is None:
            print("ERROR: no logs to export or archive could not be written", file=sys.stderr)
            return 1
        print(archive)
        return 0

    if args.action == "clear":
        deleted = store.clear_all()
        print(f"Deleted {deleted} files")
        return 0

    return 2


def cmd_profiles(ctx: AppContext, args: argparse.Namespace) -> int:
    profiles = ctx.profiles.list()
    current = ctx.profiles.get_current()

    if not profiles:
        print("  (no saved profiles)")
        return 0

    print(f"  {'':1} {'Name':<24} {'Model':<24} {'Key':<14} Base URL")
    print(f"  {'':1} {'─'*24} {'─'*24} {'─'*14} {'─'*30}")
    for p in profiles:
        marker = "*" if p.id == current else ""
        key = mask_api_key(p.config.api_key) or "-"
        print(f"  {marker:1} {p.display_name:<24} {p.config.model_name:<24} {key:<14} {p.config.base_url}")
    return 0


def cmd_import_dev(ctx: AppContext, args: argparse.Namespace) -> int:
    result = ctx.dev_importer.import_file(Path(args.file))
    if result.status == ImportStatus.FAILED:
        print(f"ERROR: import failed: {result.error}", file=sys.stderr)
        return 1
    if result.status == ImportStatus.SKIPPED:
        print("Dev profiles already imported (or file missing), nothing to do")
        return 0
    print(f"Imported {result.count} profiles")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="autoglm-store", description=__doc__,
                                     formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--data-dir", help="Storage root (overrides AUTOGLM_DATA_DIR)")
    sub = parser.add_subparsers(dest="command", required=True)

    logs = sub.add_parser("logs", help="Inspect, export or clear log files")
    logs.add_argument("action", choices=["size", "export", "clear"])
    logs.add_argument("--out", help="Export directory")
    logs.set_defaults(func=cmd_logs)

    profiles = sub.add_parser("profiles", help="Saved model profiles")
    profiles.add_argument("action", choices=["list"])
    profiles.set_defaults(func=cmd_profiles)

    import_dev = sub.add_parser("import-dev", help="Import a dev profile document once")
    import_dev.add_argument("file")
    import_dev.set_defaults(func=cmd_import_dev)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    data_dir = Path(args.data_dir).expanduser() if args.data_dir else None

    with AppContext.create(data_dir=data_dir) as ctx:
        return args.func(ctx, args)


if __name__ == "__main__":
    sys.exit(main())
