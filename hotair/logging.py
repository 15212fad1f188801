"""Console logging utilities for balloon sessions and rollouts.

Provides a small levelled console logger, a flight-specific logger that
summarises episodes, and real-time tqdm progress bars for long ``lax.scan``
rollouts using io_callback.
"""

import sys
import time
from typing import Any, Callable, Dict, Optional, Tuple

import jax
from jax.experimental import io_callback
from tqdm import tqdm


class ConsoleLogger:
    """Levelled console logger with optional colours and elapsed timestamps."""

    LEVEL_ORDER = {
        "DEBUG": 0,
        "INFO": 1,
        "WARNING": 2,
        "ERROR": 3,
        "CRITICAL": 4,
    }

    def __init__(
        self,
        name: str = "Hotair",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.log_level = log_level.upper()
        if self.log_level not in self.LEVEL_ORDER:
            raise ValueError(
                f"Unknown log level '{log_level}'. "
                f"Supported levels: {list(self.LEVEL_ORDER)}"
            )
        self.use_colors = (
            use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        )
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

        self.colors = (
            {
                "DEBUG": "\033[36m",
                "INFO": "\033[32m",
                "WARNING": "\033[33m",
                "ERROR": "\033[31m",
                "CRITICAL": "\033[35m",
                "RESET": "\033[0m",
            }
            if self.use_colors
            else {k: "" for k in [*self.LEVEL_ORDER, "RESET"]}
        )

    def _should_log(self, level: str) -> bool:
        return self.LEVEL_ORDER.get(level.upper(), 1) >= self.LEVEL_ORDER[self.log_level]

    def _format_message(self, level: str, message: str) -> str:
        timestamp = (
            f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        )
        level_str = f"[{level:>8s}]"
        if self.use_colors:
            level_str = f"{self.colors.get(level.upper(), '')}{level_str}{self.colors['RESET']}"
        return f"{timestamp}{level_str}[{self.name}] {message}"

    def log(self, level: str, message: str):
        """Log a message at the specified level."""
        if self._should_log(level):
            print(self._format_message(level, message), flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


class FlightLogger(ConsoleLogger):
    """Logger for multi-episode sessions with outcome tracking."""

    def __init__(self, name: str = "Flight", **kwargs):
        super().__init__(name, **kwargs)
        self.episodes = []

    def log_session_start(self, config: Dict[str, Any]):
        """Log the session configuration."""
        self.info("=" * 60)
        self.info("Starting session with configuration:")
        for key, value in config.items():
            if isinstance(value, float):
                self.info(f"  {key}: {value:.2e}" if 0 < abs(value) < 0.01 else f"  {key}: {value:.4f}")
            else:
                self.info(f"  {key}: {value}")
        self.info("=" * 60)

    def log_episode_end(self, episode: int, summary: Dict[str, Any]):
        """Log one finished episode and remember it for the session summary."""
        self.episodes.append(dict(summary, episode=episode))
        parts = []
        for key, value in summary.items():
            parts.append(f"{key}={value:.1f}" if isinstance(value, float) else f"{key}={value}")
        self.info(f"Episode {episode:3d} | " + " | ".join(parts))

    def log_session_end(self, best_score: int):
        """Log outcome counts and best score across the session."""
        elapsed = time.time() - self.start_time
        outcomes = {}
        for episode in self.episodes:
            outcome = episode.get("outcome", "unknown")
            outcomes[outcome] = outcomes.get(outcome, 0) + 1
        self.info("=" * 60)
        self.info(f"Session finished: {len(self.episodes)} episodes in {elapsed:.1f}s")
        for outcome, count in sorted(outcomes.items()):
            self.info(f"  {outcome}: {count}")
        self.info(f"  best score: {best_score}")
        self.info("=" * 60)


def build_tqdm_progress_bar(
    n: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **kwargs,
) -> Tuple[Callable, Callable]:
    """Build a real-time tqdm progress bar for a scan of ``n`` ticks."""
    if desc is None:
        desc = f"Flying ({n:,} ticks)"

    for kwarg in ("total", "mininterval", "maxinterval", "miniters"):
        kwargs.pop(kwarg, None)

    tqdm_bars = {}

    if print_rate is None:
        print_rate = max(1, min(n // 20, 50))
    else:
        print_rate = max(1, min(print_rate, n))

    remainder = n % print_rate

    def _define_tqdm():
        tqdm_bars[0] = tqdm(total=n, desc=desc, unit="tick", **kwargs)

    def _update_tqdm(ticks):
        if 0 in tqdm_bars:
            tqdm_bars[0].update(int(ticks))

    def _close_tqdm():
        if 0 in tqdm_bars:
            tqdm_bars[0].close()

    def _update_progress_bar(iter_num):
        _ = jax.lax.cond(
            iter_num == 0,
            lambda _: io_callback(_define_tqdm, None, ordered=True),
            lambda _: None,
            operand=None,
        )

        _ = jax.lax.cond(
            (iter_num % print_rate == 0) & (iter_num != n - remainder) & (iter_num > 0),
            lambda _: io_callback(_update_tqdm, None, print_rate, ordered=True),
            lambda _: None,
            operand=None,
        )

        _ = jax.lax.cond(
            iter_num == n - remainder,
            lambda _: io_callback(_update_tqdm, None, remainder, ordered=True),
            lambda _: None,
            operand=None,
        )

    def close_progress_bar(result, iter_num):
        _ = jax.lax.cond(
            iter_num == n - 1,
            lambda _: io_callback(_close_tqdm, None, ordered=True),
            lambda _: None,
            operand=None,
        )
        return result

    return _update_progress_bar, close_progress_bar


def scan_with_progress(
    n: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **tqdm_kwargs,
) -> Callable:
    """Decorator adding a progress bar to a scan body whose ``x`` starts with the tick index."""
    _update_progress_bar, close_progress_bar = build_tqdm_progress_bar(
        n, print_rate, desc, **tqdm_kwargs
    )

    def _scan_progress_decorator(func):
        def wrapper_with_progress(carry, x):
            iter_num = x[0] if isinstance(x, tuple) else x
            _update_progress_bar(iter_num)
            result = func(carry, x)
            return close_progress_bar(result, iter_num)

        return wrapper_with_progress

    return _scan_progress_decorator
