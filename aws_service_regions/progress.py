"""Progress sinks receiving one event per region as its probe is dispatched.

A sink is only ever written to; the prober never closes it. Whoever created the
sink decides how to signal the end of a run (the CLI enqueues ``PROGRESS_DONE``
after the probe call returns).
"""

import queue
import threading
from typing import Callable

PROGRESS_DONE = None


class ProgressSink:
    """Receives region-dispatched events. The default implementation drops them."""

    def emit(self, region: str) -> None:
        pass


NullProgressSink = ProgressSink


class QueueProgressSink(ProgressSink):
    """Puts each region on a ``queue.Queue``.

    With ``block=True`` (default) every event is delivered, but the caller must
    drain the queue continuously for the whole probe call: on a bounded queue
    with no active consumer the dispatcher blocks forever once it fills.

    With ``block=False`` events are offered with ``put_nowait`` and dropped when
    the queue is full; ``dropped`` counts them.
    """

    def __init__(self, events: queue.Queue, block: bool = True):
        self.events = events
        self.block = block
        self.dropped = 0
        self._lock = threading.Lock()

    def emit(self, region: str) -> None:
        if self.block:
            self.events.put(region)
            return
        try:
            self.events.put_nowait(region)
        except queue.Full:
            with self._lock:
                self.dropped += 1


class CallbackProgressSink(ProgressSink):
    """Calls ``callback(region)`` synchronously on the dispatching thread."""

    def __init__(self, callback: Callable[[str], None]):
        self.callback = callback

    def emit(self, region: str) -> None:
        self.callback(region)


def drain_progress(events: queue.Queue, handler: Callable[[str], None]) -> threading.Thread:
    """Start a daemon thread calling ``handler`` for each event until PROGRESS_DONE."""

    def _consume():
        while True:
            region = events.get()
            if region is PROGRESS_DONE:
                return
            handler(region)

    consumer = threading.Thread(target=_consume, name="progress-consumer", daemon=True)
    consumer.start()
    return consumer
