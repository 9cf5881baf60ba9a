"""
SisLog Entry Point

Runs a headless logging session: the clock ticks, the five collections stay
synced, and timecode changes are reported on the log. Ctrl+C shuts down
cleanly.
"""
import argparse
import signal
import sys
from pathlib import Path

from dotenv import load_dotenv

from src.utils.paths import get_app_install_dir, get_env_file_path


def load_environment() -> None:
    """
    Load .env files.

    Priority: project-root .env, then the user-data .env (highest).
    """
    install_dir = get_app_install_dir()
    if install_dir is not None:
        project_env = install_dir / ".env"
        if project_env.exists():
            load_dotenv(project_env)

    user_env = get_env_file_path()
    if user_env.exists():
        load_dotenv(user_env, override=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sislog", description="Live production event logger")
    parser.add_argument("--backend", choices=["memory", "firestore"], default=None,
                        help="Remote store for this session (defaults to the saved setting)")
    parser.add_argument("--db", type=Path, default=None,
                        help="SQLite database for local preferences")
    parser.add_argument("--seed", action="store_true",
                        help="Write sample participants, locations, actions and tags on start")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default=None,
                        help="Override the saved log level")
    return parser


def main(argv=None) -> int:
    """Main entry point for the headless session"""
    args = build_parser().parse_args(argv)
    load_environment()

    from PyQt6.QtCore import QCoreApplication, QTimer

    from src.application.bootstrap import initialize_services
    from src.utils.message import Log

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName("SisLog")
    app.setOrganizationName("SisLog")

    Log.info("=" * 60)
    Log.info("SisLog")
    Log.info("=" * 60)

    try:
        container = initialize_services(
            db_path=str(args.db) if args.db else None,
            backend=args.backend,
        )
    except Exception as e:
        Log.error(f"Fatal error during startup: {e}", exc_info=True)
        return 1

    if args.log_level:
        Log.set_level(args.log_level)

    last_second = {"value": None}

    def report_timecode(timecode: str):
        # One line per second of timecode
        second = timecode[:8]
        if second != last_second["value"]:
            last_second["value"] = second
            Log.info(f"Timecode {timecode}")

    container.clock_engine.timecode_changed.connect(report_timecode)
    container.sync_adapter.snapshot_applied.connect(
        lambda collection, count: Log.info(f"Synced {count} {collection}")
    )
    container.sync_adapter.sync_error.connect(
        lambda collection, message: Log.warning(f"Sync error on {collection}: {message}")
    )

    signal.signal(signal.SIGINT, lambda *_: app.quit())
    # Python only handles signals between bytecodes; keep the interpreter waking up
    wakeup = QTimer()
    wakeup.timeout.connect(lambda: None)
    wakeup.start(200)

    try:
        container.start(seed=True if args.seed else None)
        Log.info("Session running, press Ctrl+C to stop")
        exit_code = app.exec()
    except Exception as e:
        Log.error(f"Fatal error: {e}", exc_info=True)
        exit_code = 1
    finally:
        wakeup.stop()
        Log.info("Shutting down...")
        container.shutdown()

    Log.info("SisLog exited")
    return exit_code


if __name__ == "__main__":
    sys.exit(main())
