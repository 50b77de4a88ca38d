"""hivoice demo shell entry point.

Usage:
    python -m hivoice [OPTIONS]

Options:
    --config PATH    Path to YAML config file
    --profile NAME   Profile name (dev, prod, test)
    --help           Show this help message
    --version        Show version
"""

from pathlib import Path as _Path

from dotenv import load_dotenv

# Load .env from the project root (parent of src/), else the current directory
_env_file = _Path(__file__).parent.parent.parent / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    load_dotenv()

import argparse
import logging
import signal
import sys
import threading
import time
from pathlib import Path

from . import __version__
from .config.loader import load_config
from .config.profiles import detect_profile


def setup_logging(level: str) -> None:
    """Configure logging based on config."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="hivoice",
        description="hivoice - hands-free voice control for a task list",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m hivoice                     # Run with auto-detected profile
  python -m hivoice --profile dev       # Run with development profile
  python -m hivoice --config my.yaml    # Run with custom config file

In the shell, type what you would say. Lines starting with '!' inject
recognizer events: !network, !not-allowed, !no-speech, !end

Environment:
  HIVOICE_PROFILE    Set profile (dev, prod, test)
""",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to YAML config file",
        metavar="PATH",
    )

    parser.add_argument(
        "--profile",
        choices=["dev", "prod", "test"],
        help="Configuration profile to use",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"hivoice v{__version__}",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load config and exit (for testing)",
    )

    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use mock capabilities (no speech input or output)",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the hivoice demo shell.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = parse_args(argv)
    profile_name = args.profile or detect_profile().value

    # Load configuration
    try:
        if args.config:
            config = load_config(path=args.config)
        else:
            config = load_config(profile=profile_name)
    except FileNotFoundError as e:
        print(f"Error: Config file not found: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    # Setup logging
    setup_logging(config.logging.level)
    logger = logging.getLogger("hivoice")

    logger.info(f"hivoice v{__version__}")
    logger.info(f"Profile: {profile_name}")
    logger.info(f"Log level: {config.logging.level}")

    if args.dry_run:
        logger.info("Dry run mode - exiting after config load")
        logger.info(f"Wake phrase: {config.wake_word.phrase}")
        logger.info(f"Speech backend: {config.speech.backend}")
        logger.info(f"Reminder storage: {config.storage.backend}")
        return 0

    from .clock import EventLoopClock
    from .engine import VoiceEngine

    clock = EventLoopClock()
    try:
        engine = VoiceEngine.from_config(config, use_mocks=args.mock, clock=clock)
    except Exception as e:
        logger.error(f"Failed to initialize components: {e}")
        print(f"\nError: Failed to initialize hivoice: {e}", file=sys.stderr)
        return 1

    engine.on_alert(lambda reason, message: print(f"\n[alert] {message}\n"))
    engine.on_task_created(
        lambda task, reminder: print(
            f"\n[task] {task.to_dict()}"
            + (f"\n[reminder] {reminder.due_at.isoformat()}" if reminder else "")
            + "\n"
        )
    )

    # Print startup banner
    print("\n" + "=" * 50)
    print("  hivoice")
    print("=" * 50)
    print(f"  Version: {__version__}")
    print(f"  Profile: {profile_name}")
    print(f"  Wake phrase: {config.wake_word.phrase}")
    print(f"  Speech: {config.speech.backend}")
    print(f"  Reminders: {config.storage.backend}")
    print("=" * 50 + "\n")

    # Setup signal handlers for graceful shutdown
    shutdown_requested = False

    def signal_handler(_signum: int, _frame: object) -> None:
        nonlocal shutdown_requested
        if shutdown_requested:
            logger.warning("Force quit requested")
            sys.exit(1)
        shutdown_requested = True
        logger.info("Shutdown requested, cleaning up...")

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    print(f"Say (type) '{config.wake_word.phrase}' to activate.")
    print("Press Ctrl+C to stop.\n")

    try:
        clock.start()
        clock.call_soon(engine.start)

        # Wait for shutdown
        while not shutdown_requested:
            time.sleep(0.1)

    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        # Engine state belongs to the loop thread, so stop it there
        stopped = threading.Event()

        def stop_engine() -> None:
            engine.stop()
            stopped.set()

        clock.call_soon(stop_engine)
        stopped.wait(timeout=2.0)
        clock.stop()
        logger.info("hivoice shut down gracefully")

    return 0


if __name__ == "__main__":
    sys.exit(main())
