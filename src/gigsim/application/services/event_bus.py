from collections import defaultdict, deque
import logging
from typing import Callable, DefaultDict, Deque, Iterable, List, Type


Handler = Callable[[object], None]


class EventBus:
    """Synchronous in-process bus for simulation events.

    Handlers registered for a base class (``object`` included) also receive its
    subclasses' events. A failing handler is logged and isolated so the rest of
    the week's events still go out.
    """

    def __init__(self, history_size: int = 200) -> None:
        self._subscribers: DefaultDict[Type[object], List[tuple[int, int, Handler]]] = defaultdict(list)
        self._next_order = 0
        self._last_publish_errors: List[Exception] = []
        self._history: Deque[object] = deque(maxlen=max(0, int(history_size)))
        self._logger = logging.getLogger(__name__)

    def subscribe(self, event_type: Type[object], handler: Handler, *, priority: int = 100) -> None:
        self._subscribers[event_type].append((int(priority), self._next_order, handler))
        self._next_order += 1
        self._subscribers[event_type].sort(key=lambda row: (row[0], row[1]))

    def unsubscribe(self, event_type: Type[object], handler: Handler) -> bool:
        rows = self._subscribers.get(event_type, [])
        kept = [row for row in rows if row[2] is not handler]
        self._subscribers[event_type] = kept
        return len(kept) != len(rows)

    def _handlers_for(self, event_type: Type[object]) -> List[tuple[int, int, Handler]]:
        rows = []
        for klass in event_type.__mro__:
            rows.extend(self._subscribers.get(klass, ()))
        return sorted(rows, key=lambda row: (row[0], row[1]))

    def publish(self, event: object) -> None:
        self._last_publish_errors = []
        self._history.append(event)
        event_type = type(event)
        for priority, _, handler in self._handlers_for(event_type):
            try:
                handler(event)
            except Exception as exc:
                self._last_publish_errors.append(exc)
                handler_name = getattr(handler, "__qualname__", getattr(handler, "__name__", repr(handler)))
                self._logger.exception(
                    "Event handler failed and was isolated",
                    extra={
                        "event_type": event_type.__name__,
                        "handler": handler_name,
                        "priority": priority,
                    },
                )

    def publish_all(self, events: Iterable[object]) -> int:
        """Publish in order; returns the number of handler failures."""

        failures = 0
        for event in events:
            self.publish(event)
            failures += len(self._last_publish_errors)
        return failures

    def last_publish_errors(self) -> List[Exception]:
        return list(self._last_publish_errors)

    def history(self, event_type: Type[object] | None = None) -> List[object]:
        if event_type is None:
            return list(self._history)
        return [event for event in self._history if isinstance(event, event_type)]
