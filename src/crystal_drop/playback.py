import threading
import time
from typing import Optional

import structlog

from crystal_drop.config import DEFAULT_PLAYBACK_DELAY
from crystal_drop.engine import ThresholdSearchEngine
from crystal_drop.state_queue import SingleSlotQueue
from crystal_drop.state_snapshot import SearchState

log = structlog.get_logger(__name__)


def play_search(
    engine: ThresholdSearchEngine,
    state_queue: SingleSlotQueue[SearchState],
    *,
    delay: float = DEFAULT_PLAYBACK_DELAY,
    stop: Optional[threading.Event] = None,
) -> SearchState:
    """
    Advance the engine one probe at a time, publishing every state.

    Meant to run in a worker thread while the view consumes the queue.
    Setting `stop` ends playback after the current probe.
    """
    try:
        state = engine.snapshot()
        state_queue.publish(state)

        while not state.finished:
            if stop is not None and stop.is_set():
                log.info("playback stopped", drops=state.total_drops)
                break
            if delay > 0 and state.drops:
                time.sleep(delay)
            engine.advance()
            state = engine.snapshot()
            state_queue.publish(state)

        return state
    finally:
        # Always close the queue so the UI can exit
        state_queue.close()
