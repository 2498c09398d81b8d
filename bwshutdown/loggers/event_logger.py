"""
Event Logger
============
Async logging of monitor events (JSONL) and per-tick samples (CSV).

Writes happen on a background thread fed by a bounded queue, so the
scheduler thread never blocks on disk I/O.
"""

import csv
import json
import time
import logging
from pathlib import Path
from queue import Queue, Empty, Full
from threading import Thread
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models import MonitorEvent

from ..config import EVENTS_LOG_FILENAME, SAMPLES_LOG_FILENAME
from ..models import Nominal, BelowThreshold

logger = logging.getLogger(__name__)

SAMPLES_HEADER = ["Timestamp", "Rate_KBps", "Average_KBps", "Samples", "Status"]


class EventLogger:
    """
    Thread-safe async event logger.
    """

    QUEUE_SIZE = 10000

    def __init__(self, log_dir: Path):
        """
        Initialize logger.

        Args:
            log_dir: Directory for log files
        """
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.events_file = self.log_dir / EVENTS_LOG_FILENAME
        self.samples_file = self.log_dir / SAMPLES_LOG_FILENAME

        self.dropped = 0

        self._write_queue: Queue = Queue(maxsize=self.QUEUE_SIZE)
        self._running = True
        self._writer_thread = Thread(
            target=self._writer_worker,
            daemon=True,
            name="EventLogger-Writer"
        )
        self._writer_thread.start()

        self._init_samples_csv()

    def _init_samples_csv(self):
        """Initialize samples CSV with headers."""
        if not self.samples_file.exists():
            try:
                with open(self.samples_file, 'w', newline='', encoding='utf-8') as f:
                    csv.writer(f).writerow(SAMPLES_HEADER)
            except OSError as e:
                logger.error(f"Failed to init samples CSV: {e}")

    def _writer_worker(self):
        """Background writer thread."""
        while self._running or not self._write_queue.empty():
            try:
                item = self._write_queue.get(timeout=0.5)
            except Empty:
                continue

            try:
                self._process_write(item)
            except Exception as e:
                logger.error(f"Write error: {e}")
            finally:
                self._write_queue.task_done()

    def _process_write(self, item: dict):
        """Process a write item from the queue."""
        write_type = item.get('type')

        if write_type == 'event':
            self._write_event(item['data'])
        elif write_type == 'sample':
            self._write_sample(item['data'])

    def _write_event(self, event_dict: dict):
        """Write event to JSONL file."""
        line = json.dumps(event_dict, ensure_ascii=False)

        try:
            with open(self.events_file, 'a', encoding='utf-8') as f:
                f.write(line + "\n")
        except OSError as e:
            logger.error(f"Failed to write event: {e}")

    def _write_sample(self, row: list):
        """Write sample row to CSV."""
        try:
            with open(self.samples_file, 'a', newline='', encoding='utf-8') as f:
                csv.writer(f).writerow(row)
        except OSError as e:
            logger.error(f"Failed to write sample: {e}")

    def _enqueue(self, item: dict):
        try:
            self._write_queue.put_nowait(item)
        except Full:
            self.dropped += 1

    def log_event(self, event: "MonitorEvent"):
        """
        Queue an event for async logging.

        Nominal and BelowThreshold events also produce a samples CSV row.
        """
        data = event.to_dict()
        self._enqueue({'type': 'event', 'data': data})

        if isinstance(event, Nominal):
            self._enqueue({'type': 'sample', 'data': [
                data['timestamp'],
                f"{event.rate:.2f}",
                f"{event.average:.2f}",
                event.samples,
                "OK",
            ]})
        elif isinstance(event, BelowThreshold):
            self._enqueue({'type': 'sample', 'data': [
                data['timestamp'],
                "",
                f"{event.average:.2f}",
                event.samples,
                "BELOW",
            ]})

    def log_summary(self, summary: dict):
        """Queue a session summary record."""
        self._enqueue({
            'type': 'event',
            'data': {'event_type': 'session_summary', **summary},
        })

    def flush(self, timeout: float = 5.0):
        """Wait for all queued writes to complete."""
        deadline = time.monotonic() + timeout
        while self._write_queue.unfinished_tasks and time.monotonic() < deadline:
            time.sleep(0.05)

    def stop(self):
        """Drain the queue and stop writer thread."""
        self._running = False
        self._writer_thread.join(timeout=2.0)
        if self.dropped:
            logger.warning(f"Dropped {self.dropped} log record(s): queue full")
