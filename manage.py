#!/usr/bin/env python3
"""Cross-platform setup and run script for the VRISA alert engine.

Works on Windows 10+, macOS, and Linux without make, bash, or
any platform-specific tooling beyond Python 3.10+.

Usage:
    python manage.py setup       Create the venv and install the package
    python manage.py run         Start the production server
    python manage.py dev         Start the server with auto-reload
    python manage.py test        Run backend tests
    python manage.py seed        Load reference variables, thresholds and sensors
    python manage.py clean       Remove the venv and caches
    python manage.py status      Check installation state
"""

import argparse
import os
import shutil
import subprocess
import sys
import textwrap
import venv
from pathlib import Path

# ---------------------------------------------------------------------------
# Platform detection and paths
# ---------------------------------------------------------------------------

IS_WINDOWS = sys.platform == "win32"
ROOT = Path(__file__).resolve().parent
BACKEND_DIR = ROOT / "backend"
VENV_DIR = ROOT / ".venv"

if IS_WINDOWS:
    VENV_PYTHON = VENV_DIR / "Scripts" / "python.exe"
    VENV_PIP = VENV_DIR / "Scripts" / "pip.exe"
else:
    VENV_PYTHON = VENV_DIR / "bin" / "python"
    VENV_PIP = VENV_DIR / "bin" / "pip"

MIN_PYTHON = (3, 10)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def heading(msg: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {msg}")
    print(f"{'=' * 60}\n")


def step(msg: str) -> None:
    print(f"  -> {msg}")


def ok(msg: str) -> None:
    print(f"  [OK] {msg}")


def warn(msg: str) -> None:
    print(f"  [!!] {msg}")


def fail(msg: str) -> None:
    print(f"  [FAIL] {msg}", file=sys.stderr)


def run_cmd(
    cmd: list[str],
    cwd: Path | None = None,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run a subprocess in cwd."""
    return subprocess.run(cmd, cwd=str(cwd) if cwd else None, check=check)


def require_venv() -> bool:
    if VENV_PYTHON.exists():
        return True
    fail("Virtual environment not found. Run:  python manage.py setup")
    return False


def uvicorn_cmd(*extra: str) -> list[str]:
    host = os.environ.get("VRISA_HOST", "0.0.0.0")
    port = os.environ.get("VRISA_PORT", "8000")
    return [str(VENV_PYTHON), "-m", "uvicorn", "app.main:app",
            "--host", host, "--port", port, "--log-level", "info", *extra]


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_setup(_args: argparse.Namespace) -> int:
    """Create the venv and install the package with test extras."""
    heading("Checking prerequisites")
    v = sys.version_info
    if v < MIN_PYTHON:
        fail(f"Python {v.major}.{v.minor} found, need {MIN_PYTHON[0]}.{MIN_PYTHON[1]}+")
        return 1
    ok(f"Python {v.major}.{v.minor}.{v.micro}")

    heading("Creating Python virtual environment")
    if VENV_PYTHON.exists():
        ok(f"venv already exists at {VENV_DIR}")
    else:
        step(f"Creating venv in {VENV_DIR}")
        venv.create(str(VENV_DIR), with_pip=True)
        ok("venv created")

    heading("Installing Python dependencies")
    step("Upgrading pip")
    run_cmd([str(VENV_PIP), "install", "--upgrade", "pip"])
    step("Installing package with test extras")
    run_cmd([str(VENV_PIP), "install", "-e", f"{ROOT}[test]"])
    ok("Python dependencies installed")

    heading("Setup complete")
    print(textwrap.dedent("""\
        Next steps:
          1. Optionally create .env (VRISA_DATABASE_URL, VRISA_DEDUP_WINDOW_MINUTES, ...)
          2. Load reference data:  python manage.py seed
          3. Run the server:       python manage.py run
    """))
    return 0


def cmd_run(_args: argparse.Namespace) -> int:
    """Start the production server."""
    if not require_venv():
        return 1
    heading("Starting VRISA alert engine")
    step("Press Ctrl+C to stop\n")
    return run_cmd(uvicorn_cmd(), cwd=BACKEND_DIR, check=False).returncode


def cmd_dev(_args: argparse.Namespace) -> int:
    """Start the server with auto-reload."""
    if not require_venv():
        return 1
    heading("Starting development server")
    step("Press Ctrl+C to stop\n")
    try:
        return run_cmd(uvicorn_cmd("--reload"), cwd=BACKEND_DIR, check=False).returncode
    except KeyboardInterrupt:
        return 0


def cmd_test(_args: argparse.Namespace) -> int:
    """Run backend tests."""
    if not require_venv():
        return 1
    heading("Running backend tests")
    result = run_cmd(
        [str(VENV_PYTHON), "-m", "pytest", str(ROOT / "tests" / "backend"), "-v"],
        cwd=ROOT,
        check=False,
    )
    return result.returncode


def cmd_seed(_args: argparse.Namespace) -> int:
    """Load reference variables, thresholds, stations and sensors."""
    if not require_venv():
        return 1
    heading("Seeding reference data")
    result = run_cmd([str(VENV_PYTHON), "-m", "app.seed"], cwd=BACKEND_DIR, check=False)
    if result.returncode == 0:
        ok("Reference data loaded")
    return result.returncode


def cmd_clean(_args: argparse.Namespace) -> int:
    """Remove the venv and caches."""
    heading("Cleaning build artifacts")
    if VENV_DIR.exists():
        step(f"Removing {VENV_DIR.relative_to(ROOT)}")
        shutil.rmtree(VENV_DIR)

    # Python caches
    for pattern in ("__pycache__", ".pytest_cache", "*.egg-info"):
        for d in ROOT.rglob(pattern):
            if d.is_dir():
                step(f"Removing {d.relative_to(ROOT)}")
                shutil.rmtree(d)

    ok("Clean complete")
    return 0


def cmd_status(_args: argparse.Namespace) -> int:
    """Check installation state."""
    heading("Installation status")

    v = sys.version_info
    ok(f"Python {v.major}.{v.minor}.{v.micro}")

    if VENV_PYTHON.exists():
        ok(f"Python venv: {VENV_DIR}")
    else:
        warn("Python venv: not created")

    env_file = ROOT / ".env"
    if env_file.exists():
        ok(f".env file: {env_file}")
    else:
        warn(".env file: not created (will use defaults)")

    db_files = list(ROOT.glob("*.db"))
    if db_files:
        for db in db_files:
            ok(f"Database: {db}")
    else:
        step("Database: will be created on first run")

    return 0


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main() -> int:
    parser = argparse.ArgumentParser(
        prog="manage.py",
        description="VRISA alert engine: cross-platform setup and launcher",
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("setup", help="Create the venv and install the package")
    sub.add_parser("run", help="Start the production server")
    sub.add_parser("dev", help="Start the server with auto-reload")
    sub.add_parser("test", help="Run backend tests")
    sub.add_parser("seed", help="Load reference variables, thresholds and sensors")
    sub.add_parser("clean", help="Remove the venv and caches")
    sub.add_parser("status", help="Check installation state")

    args = parser.parse_args()

    commands = {
        "setup": cmd_setup,
        "run": cmd_run,
        "dev": cmd_dev,
        "test": cmd_test,
        "seed": cmd_seed,
        "clean": cmd_clean,
        "status": cmd_status,
    }

    if args.command is None:
        parser.print_help()
        return 0

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
