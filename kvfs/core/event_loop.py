"""
kvfs Event Loop

A cooperative timer loop used to pace simulated streams:
- Zero-delay and delayed timer callbacks
- FIFO ordering for callbacks due at the same time
- Caller-driven execution (no background thread)
"""

import heapq
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, List

from kvfs.logger import get_logger


@dataclass(order=True)
class TimerEvent:
    """
    A scheduled callback.

    Events are ordered by due time, then by scheduling order.
    """
    scheduled_time: float
    event_id: int
    callback: Callable = field(compare=False, default=lambda: None)
    args: tuple = field(compare=False, default=())

    def execute(self) -> Any:
        return self.callback(*self.args)


class EventLoop:
    """
    The stream pacing loop.

    Nothing runs until the owner pumps the loop with ``run_pending`` or
    ``run_until_idle``. Callbacks scheduled while the loop is running
    are picked up on a later turn, like ``setTimeout(fn, 0)``.

    Example:
        >>> loop = EventLoop()
        >>> loop.schedule_timer(print, 0.0, 'tick')
        >>> loop.run_until_idle()
        tick
    """

    def __init__(self):
        self._logger = get_logger('event_loop')
        self._timer_queue: List[TimerEvent] = []  # heapq
        self._event_counter = 0
        self._cancelled: set[int] = set()

        # Statistics
        self._events_processed = 0
        self._events_failed = 0

    def _next_event_id(self) -> int:
        self._event_counter += 1
        return self._event_counter

    def schedule_timer(self, callback: Callable, delay: float = 0.0, *args: Any) -> int:
        """
        Schedule a callback.

        Args:
            callback: Function to call when the timer fires
            delay: Delay in seconds before the timer fires
            *args: Positional arguments passed to the callback

        Returns:
            Event ID for cancellation
        """
        event = TimerEvent(
            scheduled_time=time.monotonic() + max(delay, 0.0),
            event_id=self._next_event_id(),
            callback=callback,
            args=args
        )
        heapq.heappush(self._timer_queue, event)
        return event.event_id

    def cancel_event(self, event_id: int) -> bool:
        """
        Cancel a scheduled timer.

        Returns:
            True if the timer was pending, False otherwise
        """
        # Mark as cancelled; the heap entry is dropped when popped
        for event in self._timer_queue:
            if event.event_id == event_id and event_id not in self._cancelled:
                self._cancelled.add(event_id)
                return True
        return False

    @property
    def pending(self) -> int:
        """Number of timers still waiting to fire."""
        return len(self._timer_queue) - len(self._cancelled)

    def _execute_event(self, event: TimerEvent) -> None:
        """Execute a single event, logging callback failures."""
        try:
            event.execute()
            self._events_processed += 1
        except Exception as e:
            self._events_failed += 1
            self._logger.exception(
                f"Error executing timer callback: {e}",
                exc=e,
                context={'event_id': event.event_id}
            )

    def run_pending(self) -> int:
        """
        Run one turn: every timer that was already due when the turn started.

        Returns:
            Number of callbacks executed
        """
        now = time.monotonic()
        due: List[TimerEvent] = []

        # Collect due events first so callbacks scheduled now wait a turn

        while self._timer_queue and self._timer_queue[0].scheduled_time <= now:
            event = heapq.heappop(self._timer_queue)
            # Skip cancelled events
            if event.event_id in self._cancelled:
                self._cancelled.discard(event.event_id)
                continue
            due.append(event)

        for event in due:
            self._execute_event(event)

        return len(due)

    def run_until_idle(self, timeout: Optional[float] = None) -> int:
        """
        Run turns until no timers remain.

        Args:
            timeout: Maximum seconds to keep running (None for no limit)

        Returns:
            Number of callbacks executed
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        executed = 0

        while self.pending > 0:
            if deadline is not None and time.monotonic() >= deadline:
                break

            executed += self.run_pending()

            # Sleep until the next timer is due
            if self._timer_queue:
                wait = self._timer_queue[0].scheduled_time - time.monotonic()
                if deadline is not None:
                    wait = min(wait, deadline - time.monotonic())
                if wait > 0:
                    time.sleep(wait)

        return executed

    def get_stats(self) -> dict[str, Any]:
        """Get event loop statistics."""
        return {
            'events_processed': self._events_processed,
            'events_failed': self._events_failed,
            'pending_timers': self.pending,
        }
