"""
bwshutdown - Main Entry Point
=============================
Shut the host down once network throughput stays low.

Run with: python -m bwshutdown
"""

import sys
import signal
import argparse
import logging
from pathlib import Path

from .config import MonitorConfig, ConfigError, load_config
from .models import BelowThreshold
from .monitor import MonitorEngine
from .loggers import EventLogger
from .actions import ShutdownAction
from .utils import Console

DISPLAY_INTERVAL = 1.0


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='bwshutdown',
        description="Shut down the host when bandwidth stays below a threshold",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m bwshutdown --testing              # Report only, never shut down
  python -m bwshutdown -t 200 -i 2 -d 600     # 200 KB/s for 10 minutes
  python -m bwshutdown --config my.yaml       # Custom config file
        """
    )

    parser.add_argument(
        '--threshold', '-t',
        type=float,
        default=None,
        help='Threshold in KB/s (default: 200)'
    )

    parser.add_argument(
        '--interval', '-i',
        type=int,
        default=None,
        help='Seconds between samples (default: 2)'
    )

    parser.add_argument(
        '--delay', '-d',
        type=int,
        default=None,
        help='Seconds the average must stay below threshold (default: 60)'
    )

    parser.add_argument(
        '--testing',
        action='store_true',
        help='Testing mode: report the trigger instead of shutting down'
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        default=None,
        help='Path to config file (YAML or JSON)'
    )

    parser.add_argument(
        '--log-dir',
        type=str,
        default=None,
        help='Directory for event and sample logs'
    )

    parser.add_argument(
        '--no-log',
        action='store_true',
        help='Do not write event and sample logs'
    )

    parser.add_argument(
        '--live',
        action='store_true',
        help='Show a live status line instead of one line per sample'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    return parser


def apply_args(config: MonitorConfig, args) -> MonitorConfig:
    """Override file settings with CLI arguments."""
    if args.threshold is not None:
        config.threshold_kbps = args.threshold
    if args.interval is not None:
        config.interval_seconds = args.interval
    if args.delay is not None:
        config.delay_seconds = args.delay
    if args.testing:
        config.testing_mode = True
    if args.log_dir:
        config.log_dir = Path(args.log_dir)
    if args.no_log:
        config.log_enabled = False
    return config


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose)
    if not Console.supports_color():
        Console.disable_colors()

    try:
        config = load_config(Path(args.config) if args.config else None)
    except ConfigError as e:
        Console.print_error(str(e))
        sys.exit(1)
    config = apply_args(config, args)

    config_errors = config.validate()
    if config_errors:
        for error in config_errors:
            Console.print_error(error)
        sys.exit(1)

    event_logger = EventLogger(config.log_dir) if config.log_enabled else None
    action = ShutdownAction(config.shutdown_command)
    engine = MonitorEngine(config)

    def on_event(event):
        if event_logger:
            event_logger.log_event(event)

        if isinstance(event, BelowThreshold):
            if args.live:
                print()
            Console.print_event(event)
            action(event)
            if event.testing_mode:
                engine.stop()
        elif not args.live:
            Console.print_event(event)

    engine.event_callback = on_event

    def signal_handler(sig, frame):
        Console.print_info("Ctrl+C received, stopping...")
        engine.stop()

    signal.signal(signal.SIGINT, signal_handler)

    Console.print_banner()
    Console.print_config(
        config.threshold_kbps,
        config.interval_seconds,
        config.delay_seconds,
        config.samples_required,
        config.testing_mode,
        str(config.log_dir.absolute()) if config.log_enabled else "disabled",
    )

    try:
        engine.start()
    except ConfigError as e:
        Console.print_error(str(e))
        sys.exit(1)

    try:
        while not engine.wait(DISPLAY_INTERVAL):
            if args.live:
                Console.print_stats(engine.get_stats())
    finally:
        summary = engine.get_session_summary()
        engine.stop()
        Console.print_summary(summary)

        if event_logger:
            event_logger.log_summary(summary)
            event_logger.stop()


if __name__ == "__main__":
    main()
