"""Compute and record wall clock time spent in phases of a computation."""

import time
from contextlib import contextmanager
from functools import wraps

from trajopt_util.logconfig import create_logger

LOG = create_logger(__name__)


class Stopwatch:
    """Record elapsed wall clock time since construction or the last reset."""

    def __init__(self):
        """Store the current time as the start time."""
        self._start_time_ns = time.perf_counter_ns()

    def reset(self):
        """Reset the start time to the current time."""
        self._start_time_ns = time.perf_counter_ns()

    @property
    def elapsed_time(self) -> float:
        """Elapsed time in seconds."""
        return self.elapsed_time_ns * 1e-9

    @property
    def elapsed_time_ns(self) -> int:
        """Elapsed time in nanoseconds."""
        return time.perf_counter_ns() - self._start_time_ns

    def elapsed_time_formatted(self) -> str:
        """Elapsed time as a human readable string."""
        return self.format_ns(self.elapsed_time_ns)

    @staticmethod
    def format_ns(nanoseconds: int) -> str:
        """Format a duration in nanoseconds.

        The duration is reported in seconds, milliseconds, microseconds or
        nanoseconds. Durations of a minute or longer additionally carry the
        breakdown into hours, minutes and seconds, e.g.
        "125 second(s) (2 minute(s), 5 second(s))".
        """
        seconds = nanoseconds * 1e-9
        rounded_seconds = int(round(seconds))
        if seconds > 1:
            message = f"{rounded_seconds} second(s)"
        elif nanoseconds >= 1_000_000:
            message = f"{nanoseconds // 1_000_000} millisecond(s)"
        elif nanoseconds >= 1_000:
            message = f"{nanoseconds // 1_000} microsecond(s)"
        else:
            message = f"{nanoseconds} nanosecond(s)"

        minutes, hours = rounded_seconds // 60, rounded_seconds // 3600
        if hours:
            message += f" ({hours} hour(s), {minutes % 60} minute(s), {rounded_seconds % 60} second(s))"
        elif minutes:
            message += f" ({minutes % 60} minute(s), {rounded_seconds % 60} second(s))"
        return message


class ComplexityMonitor:
    """Collect the wall clock time of named phases and report them."""

    def __init__(self):
        self.monitor_log = {}

    @contextmanager
    def track(self, phase_name: str):
        """Time the enclosed block and record it under the phase name."""
        stopwatch = Stopwatch()
        try:
            yield stopwatch
        finally:
            self.monitor_log.setdefault(phase_name, []).append(stopwatch.elapsed_time)

    def monitored(self, func):
        """Decorator to record each call of a function as a phase of its own name."""

        @wraps(func)
        def wrapper(*args, **kwargs):
            with self.track(func.__name__):
                return func(*args, **kwargs)

        return wrapper

    def total_time(self, phase_name: str) -> float:
        """Total recorded time of a phase, zero if it never ran."""
        return sum(self.monitor_log.get(phase_name, ()))

    def report_complexity(self):
        """Logs a report of monitored phase durations."""
        report_msg = ["\nComplexity Monitoring Report:"]
        # Iterate through the monitored phases and their execution times
        for phase_name, times in self.monitor_log.items():
            total_time = sum(times)
            avg_time = total_time / len(times)
            report_msg.append(
                f"{phase_name}: called {len(times)} times | total execution time: {total_time:.6f}s | "
                f"average execution time: {avg_time:.6f}"
            )
        LOG.info("\n".join(report_msg))
