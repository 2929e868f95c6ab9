#!/usr/bin/env python3
"""
Stock Ledger management CLI.

Usage:
    python manage.py start             Apply migrations & start server
    python manage.py stop              Graceful shutdown
    python manage.py restart           Stop + start
    python manage.py dev               Backend with auto-reload (foreground)
    python manage.py status            Check if server is running
    python manage.py migrate           Apply pending schema migrations
    python manage.py rebuild-balances  Replay the movement log into cached balances
    python manage.py reconcile         Report cached balances that disagree with the log
"""

import argparse
import asyncio
import os
import signal
import socket
import subprocess
import sys
import time
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent
PID_FILE = ROOT_DIR / ".ledger.pid"


def _read_pid() -> int | None:
    """Read PID from .ledger.pid, return None if missing or stale."""
    if not PID_FILE.exists():
        return None
    try:
        pid = int(PID_FILE.read_text().strip())
    except (ValueError, OSError):
        return None
    if _is_pid_alive(pid):
        return pid
    PID_FILE.unlink(missing_ok=True)
    return None


def _is_pid_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
        return True
    except OSError:
        return False


def _is_port_free(port: int) -> bool:
    """Check if a port is available for binding."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind(("127.0.0.1", port))
        return True
    except OSError:
        return False


def _stop_pid(pid: int, timeout: float = 3.0) -> bool:
    """SIGTERM the process and wait for it to exit. Returns True once it is gone."""
    try:
        os.kill(pid, signal.SIGTERM)
    except OSError:
        return True
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if not _is_pid_alive(pid):
            return True
        time.sleep(0.1)
    return not _is_pid_alive(pid)


def _uvicorn_cmd(args: argparse.Namespace, reload: bool = False) -> list[str]:
    cmd = [
        sys.executable, "-m", "uvicorn",
        "src.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if reload:
        cmd.append("--reload")
    return cmd


def _migrate(db_path: Path | None) -> bool:
    """Apply pending migrations. Returns False if any migration failed."""
    from src.infrastructure.storage.sqlite.migrations import initialize_database

    results = asyncio.run(initialize_database(db_path))
    for result in results:
        status = "SUCCESS" if result.success else "FAILED"
        print(f"[{status}] v{result.version}: {result.name} ({result.execution_time_ms}ms)")
        if result.error:
            print(f"         Error: {result.error}")
    return all(r.success for r in results)


def cmd_start(args: argparse.Namespace) -> None:
    """Apply migrations and start the server in the background."""
    existing_pid = _read_pid()
    if existing_pid is not None:
        print(f"Server already running (PID {existing_pid}). Use 'restart' or 'stop' first.")
        sys.exit(1)

    if not _is_port_free(args.port):
        print(f"Error: Port {args.port} is in use.")
        sys.exit(1)

    if not _migrate(None):
        sys.exit(1)

    print(f"Starting server on {args.host}:{args.port}...")
    proc = subprocess.Popen(_uvicorn_cmd(args), cwd=str(ROOT_DIR))
    PID_FILE.write_text(str(proc.pid))
    print(f"Server started (PID {proc.pid}).")
    print(f"  API:      http://{args.host}:{args.port}/api")
    print(f"  PID file: {PID_FILE}")


def cmd_stop(args: argparse.Namespace) -> None:
    """Stop the running server."""
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
        return

    print(f"Stopping server (PID {pid})...")
    stopped = _stop_pid(pid)
    PID_FILE.unlink(missing_ok=True)
    if stopped:
        print("Server stopped.")
    else:
        print("Warning: Server may still be running.")


def cmd_restart(args: argparse.Namespace) -> None:
    cmd_stop(args)
    cmd_start(args)


def cmd_dev(args: argparse.Namespace) -> None:
    """Run the backend in the foreground with --reload."""
    print(f"Starting backend on {args.host}:{args.port} (reload mode)...")
    try:
        subprocess.run(_uvicorn_cmd(args, reload=True), cwd=str(ROOT_DIR))
    except KeyboardInterrupt:
        print("\nDev server stopped.")


def cmd_status(args: argparse.Namespace) -> None:
    """Check if the server is running."""
    pid = _read_pid()
    if pid is not None:
        print(f"Server is running (PID {pid}).")
    elif not _is_port_free(args.port):
        print(f"No PID file. Port {args.port} is in use by another process.")
    else:
        print(f"Server is not running (port {args.port} is free).")


def cmd_migrate(args: argparse.Namespace) -> None:
    if not _migrate(args.db_path):
        sys.exit(1)


def _print_report(report) -> None:
    print(f"Movements replayed: {report.movements_replayed}")
    print(f"Balances:           {report.pairs}")
    print(f"Mismatches:         {len(report.mismatches)}")
    for m in report.mismatches:
        print(
            f"  item {m.item_id} / warehouse {m.warehouse_id}: "
            f"cached {m.cached_quantity} -> replayed {m.replayed_quantity}"
        )


def cmd_rebuild_balances(args: argparse.Namespace) -> None:
    """Replace cached balances with the replayed movement log."""
    from src.infrastructure.storage.sqlite.migrations import rebuild_balances

    report = asyncio.run(rebuild_balances(args.db_path, apply=True))
    _print_report(report)


def cmd_reconcile(args: argparse.Namespace) -> None:
    """Exit non-zero when cached balances disagree with the log."""
    from src.infrastructure.storage.sqlite.migrations import rebuild_balances

    report = asyncio.run(rebuild_balances(args.db_path, apply=False))
    _print_report(report)
    if not report.consistent:
        sys.exit(2)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Stock Ledger management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    for name, func, help_text in (
        ("start", cmd_start, "Apply migrations and start server"),
        ("restart", cmd_restart, "Restart the server"),
        ("dev", cmd_dev, "Start backend with auto-reload"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
        p.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
        p.set_defaults(func=func)

    p_stop = sub.add_parser("stop", help="Stop the server")
    p_stop.set_defaults(func=cmd_stop)

    p_status = sub.add_parser("status", help="Check if server is running")
    p_status.add_argument("--port", type=int, default=8000, help="Port to check (default: 8000)")
    p_status.set_defaults(func=cmd_status)

    for name, func, help_text in (
        ("migrate", cmd_migrate, "Apply pending schema migrations"),
        ("rebuild-balances", cmd_rebuild_balances, "Rebuild cached balances from the log"),
        ("reconcile", cmd_reconcile, "Verify cached balances against the log"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--db-path", type=Path, default=None, help="Database path (default from settings)")
        p.set_defaults(func=func)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
