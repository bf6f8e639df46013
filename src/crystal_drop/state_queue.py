from typing import Generic, Iterator, Optional, TypeVar
import threading


T = TypeVar("T")


class SingleSlotQueue(Generic[T]):
    """Hands search states from the playback worker to the view, keeping only the newest."""

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._has_value = False
        self._value: Optional[T] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        with self._condition:
            return self._closed

    def publish(self, item: T) -> None:
        """Replace the pending state. Ignored once the queue is closed."""
        with self._condition:
            if self._closed:
                return
            self._value = item
            self._has_value = True
            self._condition.notify()

    def close(self) -> None:
        """Stop accepting states and wake the view."""
        with self._condition:
            self._closed = True
            self._condition.notify_all()

    def get(self, timeout: Optional[float] = None) -> Optional[T]:
        """
        Wait for the next state.

        A state published before close() is still returned; after that,
        None signals the end of the search.
        """
        with self._condition:
            ready = self._condition.wait_for(
                lambda: self._has_value or self._closed, timeout
            )
            if not ready:
                raise TimeoutError("no search state within timeout")
            if not self._has_value:
                return None
            state, self._value = self._value, None
            self._has_value = False
            return state

    def __iter__(self) -> Iterator[T]:
        while True:
            state = self.get()
            if state is None:
                return
            yield state
