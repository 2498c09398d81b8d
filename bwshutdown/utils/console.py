"""
Console Output Utilities
========================
Formatted console output with colors and a threshold bar.
"""

import sys
from datetime import datetime

from ..models import Nominal, BelowThreshold, SampleFailed


class Console:
    """
    Console output helper with ANSI colors.
    """

    # ANSI color codes
    RESET = "\033[0m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"
    BOLD = "\033[1m"

    # Status indicators
    OK = f"{GREEN}[OK]{RESET}"
    FILLING = f"{YELLOW}[FILL]{RESET}"
    LOW = f"{RED}[LOW]{RESET}"
    ALERT = f"{RED}[!]{RESET}"
    INFO = f"{BLUE}[*]{RESET}"

    @classmethod
    def supports_color(cls) -> bool:
        """Check if terminal supports color."""
        return hasattr(sys.stdout, 'isatty') and sys.stdout.isatty()

    @classmethod
    def disable_colors(cls):
        """Strip ANSI codes from all output (redirected stdout)."""
        for name in ('RESET', 'RED', 'GREEN', 'YELLOW', 'BLUE', 'CYAN', 'GRAY', 'BOLD'):
            setattr(cls, name, "")
        cls.OK = "[OK]"
        cls.FILLING = "[FILL]"
        cls.LOW = "[LOW]"
        cls.ALERT = "[!]"
        cls.INFO = "[*]"

    @classmethod
    def print_banner(cls):
        """Print the startup banner."""
        print("=" * 60)
        print(f"  {cls.CYAN}{cls.BOLD}BANDWIDTH SHUTDOWN MONITOR{cls.RESET}")
        print("=" * 60)

    @classmethod
    def print_config(cls, threshold: float, interval: float, delay: float,
                     samples_required: int, testing_mode: bool, log_dir: str):
        """Print configuration info."""
        mode = f"{cls.YELLOW}TESTING{cls.RESET}" if testing_mode else f"{cls.RED}LIVE{cls.RESET}"
        print(f"  Threshold: {threshold} KB/s | Interval: {interval}s | Delay: {delay}s")
        print(f"  Window: {samples_required} samples | Mode: {mode}")
        print(f"  Logs: {log_dir}")
        print("=" * 60)
        print(f"{cls.INFO} Monitoring... Press Ctrl+C to stop.\n")

    @classmethod
    def progress_bar(cls, value: float, max_value: float, width: int = 25) -> str:
        """Create a progress bar string."""
        if max_value <= 0:
            ratio = 0
        else:
            ratio = min(value / max_value, 1.0)

        filled = int(ratio * width)
        return "█" * filled + "░" * (width - filled)

    @staticmethod
    def _timestamp() -> str:
        return datetime.now().strftime("%H:%M:%S")

    @classmethod
    def format_event(cls, event) -> str:
        """Format one monitor event as a log line."""
        ts = f"{cls.GRAY}[{cls._timestamp()}]{cls.RESET}"

        if isinstance(event, BelowThreshold):
            return (
                f"{ts} {cls.LOW} {cls.RED}Bandwidth average {round(event.average)} KB/s "
                f"below threshold. Initiating shutdown.{cls.RESET}"
            )
        if isinstance(event, SampleFailed):
            return f"{ts} {cls.ALERT} Sample skipped: {event.reason}"
        if isinstance(event, Nominal):
            return (
                f"{ts} {cls.OK} Bandwidth: {round(event.rate)} KB/s, "
                f"Average: {round(event.average)} KB/s ({event.samples})"
            )
        return f"{ts} {event}"

    @classmethod
    def print_event(cls, event):
        print(cls.format_event(event), flush=True)

    @classmethod
    def format_stats(cls, stats: dict) -> str:
        """Format a live status line from engine stats."""
        rate = stats.get('rate_kbps', 0.0)
        avg = stats.get('average_kbps', 0.0)
        threshold = stats.get('threshold_kbps', 0.0)
        samples = stats.get('samples', 0)
        required = stats.get('samples_required', 0)

        if stats.get('below_threshold'):
            status = cls.LOW
        elif samples < required:
            status = cls.FILLING
        else:
            status = cls.OK

        bar = cls.progress_bar(avg, threshold * 2)

        return (
            f"\r{status} Current: {round(rate):6} KB/s | Avg: {round(avg):6} KB/s "
            f"[{bar}] thr {threshold:.0f} | {samples}/{required}  "
        )

    @classmethod
    def print_stats(cls, stats: dict):
        """Print stats line (overwrites previous)."""
        print(cls.format_stats(stats), end="", flush=True)

    @classmethod
    def print_summary(cls, summary: dict):
        """Print session summary."""
        session = summary.get('session', {})
        stats = summary.get('stats', {})

        print("\n" + "=" * 60)
        print(f"  {cls.BOLD}SESSION SUMMARY{cls.RESET}")
        print("=" * 60)
        print(f"  Started:          {session.get('start_time', '-')}")
        print(f"  Ticks:            {session.get('ticks', 0)} ({session.get('failed_ticks', 0)} skipped)")
        print(f"  Rate range:       {session.get('min_rate_kbps', 0):.1f} - "
              f"{session.get('max_rate_kbps', 0):.1f} KB/s")
        print(f"  Final average:    {session.get('final_average_kbps', 0):.1f} KB/s "
              f"(threshold {stats.get('threshold_kbps', 0)} KB/s)")
        if session.get('fired'):
            print(f"  {cls.RED}Trigger fired{cls.RESET}")
        print("=" * 60)

    @classmethod
    def print_error(cls, message: str):
        """Print error message."""
        print(f"\n{cls.ALERT} {cls.RED}{message}{cls.RESET}")

    @classmethod
    def print_info(cls, message: str):
        """Print info message."""
        print(f"{cls.INFO} {message}")
