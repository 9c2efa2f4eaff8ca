"""Bounded status polling with a console spinner."""

import sys
import time
from typing import Callable, Iterable, Optional, TextIO

from epubdate.domain.exceptions import PollTimeoutError
from epubdate.shared.logging import get_logger

logger = get_logger(__name__)

SPINNER_FRAMES = ('-', '\\', '|', '/')


class StatusPoller:
    """
    Waits for a remote status to reach a terminal value.

    One poll interval is ``interval_ticks`` spinner rotations; each rotation
    draws the four spinner frames, sleeping ``tick_seconds`` after each.
    With the defaults (5 ticks, 0.25s) a status is fetched every 5 seconds.

    Implements IPoller protocol.
    """

    def __init__(
        self,
        interval_ticks: int = 5,
        tick_seconds: float = 0.25,
        max_polls: Optional[int] = 720,
        sleep: Callable[[float], None] = time.sleep,
        stream: Optional[TextIO] = None,
        metrics=None
    ):
        """
        Initialize poller.

        Args:
            interval_ticks: Spinner rotations between two status checks
            tick_seconds: Sleep after each spinner frame
            max_polls: Give up after this many checks (None polls forever)
            sleep: Sleep function, injectable for tests
            stream: Where the spinner is drawn (default: stdout; skipped unless a TTY)
            metrics: Optional collector, counts ``status_polls``
        """
        if interval_ticks <= 0:
            raise ValueError("interval_ticks must be positive")
        self.interval_ticks = interval_ticks
        self.tick_seconds = tick_seconds
        self.max_polls = max_polls
        self._sleep = sleep
        self._stream = stream
        self._metrics = metrics

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def wait_interval(self, label: str) -> None:
        """Sleep one poll interval, spinning only on an interactive stream."""
        draw = self._interactive()
        for _ in range(self.interval_ticks):
            for frame in SPINNER_FRAMES:
                if draw:
                    self.stream.write(f"{label} {frame} \r")
                    self.stream.flush()
                self._sleep(self.tick_seconds)

    def _interactive(self) -> bool:
        return self.stream.isatty()

    def poll(
        self,
        check: Callable[[], str],
        terminal: Iterable[str],
        label: str = "Waiting for Bookflow to finish"
    ) -> str:
        """
        Call ``check`` once per interval until it returns a terminal status.

        Args:
            check: Fetches the current status string
            terminal: Statuses that end the wait, successful or not
            label: Text shown next to the spinner

        Returns:
            The first terminal status observed

        Raises:
            PollTimeoutError: If max_polls checks return non-terminal statuses
        """
        terminal = frozenset(terminal)
        polls = 0

        while True:
            if self.max_polls is not None and polls >= self.max_polls:
                self._clear_line(label)
                raise PollTimeoutError(
                    f"No terminal status after {polls} polls "
                    f"(expected one of: {', '.join(sorted(terminal))})"
                )

            self.wait_interval(label)
            status = check()
            polls += 1
            if self._metrics is not None:
                self._metrics.increment_counter('status_polls')

            logger.debug(f"Poll #{polls}: status={status!r}")

            if status in terminal:
                self._clear_line(label)
                return status

    def _clear_line(self, label: str) -> None:
        self.stream.write(" " * (len(label) + 3) + "\r")
        self.stream.flush()
