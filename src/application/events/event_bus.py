"""
Event Bus System

Provides publish/subscribe pattern for domain events, plus the main-thread
hand-off every other component uses.

Thread-safe and Qt-aware: when events are published (or calls are made
through call_on_main_thread) from background threads, the work is posted to
a dispatcher QObject living on the main thread and runs in the event loop.
"""
from typing import Dict, List, Callable, Union, Type
from threading import Lock, current_thread, main_thread

from PyQt6.QtCore import QObject, QCoreApplication, QEvent

from src.application.events.events import DomainEvent
from src.utils.message import Log


class MainThreadCallEvent(QEvent):
    """Custom event carrying a callable and its arguments across threads."""
    EVENT_TYPE = QEvent.Type(QEvent.registerEventType())

    def __init__(self, fn: Callable, args: tuple, label: str):
        super().__init__(self.EVENT_TYPE)
        self.fn = fn
        self.args = args
        self.label = label


class EventDispatcher(QObject):
    """QObject that lives on the main thread and runs posted calls."""

    def event(self, e):
        if isinstance(e, MainThreadCallEvent):
            try:
                e.fn(*e.args)
            except Exception as ex:
                Log.error(f"EventDispatcher: Error in '{e.label}': {ex}", exc_info=True)
            return True
        return super().event(e)


_event_dispatcher = None


def init_event_dispatcher() -> EventDispatcher:
    """Create the dispatcher. Must be called on the main thread during startup."""
    global _event_dispatcher
    if _event_dispatcher is None:
        if current_thread() is not main_thread():
            Log.warning("EventBus: EventDispatcher initialized off the main thread")
        _event_dispatcher = EventDispatcher()
        Log.debug("EventBus: EventDispatcher initialized")
    return _event_dispatcher


def get_event_dispatcher() -> EventDispatcher:
    if _event_dispatcher is None:
        Log.warning("EventBus: EventDispatcher accessed before initialization - creating now")
        return init_event_dispatcher()
    return _event_dispatcher


def is_main_thread() -> bool:
    return current_thread() is main_thread()


def call_on_main_thread(fn: Callable, *args, label: str = None) -> None:
    """
    Run fn(*args) on the main thread.

    Runs immediately when already on the main thread (or when no Qt
    application exists yet); otherwise the call is queued and executes on
    the next pass of the main event loop. Queued calls run in posting order.

    Args:
        fn: Callable to invoke
        *args: Positional arguments for fn
        label: Name used in error logs
    """
    label = label or getattr(fn, "__qualname__", repr(fn))
    if is_main_thread():
        fn(*args)
        return

    if QCoreApplication.instance() is None:
        Log.warning(f"EventBus: no Qt application, running '{label}' on background thread")
        fn(*args)
        return

    QCoreApplication.postEvent(get_event_dispatcher(), MainThreadCallEvent(fn, args, label))


class EventBus:
    """
    Event bus for publishing and subscribing to domain events.

    Usage:
        bus = EventBus()
        bus.subscribe(SnapshotApplied, handle_snapshot)
        bus.publish(SnapshotApplied(data={"collection": "tags", "count": 5}))
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[DomainEvent], None]]] = {}
        self._lock = Lock()
        Log.info("EventBus: Initialized")

    def _normalize_event_name(self, event_name_or_class: Union[str, Type[DomainEvent]]) -> str:
        """Convert event class or string to normalized string name."""
        if isinstance(event_name_or_class, str):
            return event_name_or_class
        if hasattr(event_name_or_class, 'name'):
            return event_name_or_class.name
        return event_name_or_class.__name__

    def subscribe(self, event_name: Union[str, Type[DomainEvent]], handler: Callable[[DomainEvent], None]) -> None:
        """
        Subscribe to events of a specific type.

        Args:
            event_name: Name of the event type (e.g., "SnapshotApplied") or event class
            handler: Function to call when event is published
        """
        event_name = self._normalize_event_name(event_name)
        with self._lock:
            handlers = self._subscribers.setdefault(event_name, [])
            if handler not in handlers:
                handlers.append(handler)

    def unsubscribe(self, event_name: Union[str, Type[DomainEvent]], handler: Callable[[DomainEvent], None]) -> None:
        event_name = self._normalize_event_name(event_name)
        with self._lock:
            handlers = self._subscribers.get(event_name)
            if handlers and handler in handlers:
                handlers.remove(handler)
                if not handlers:
                    del self._subscribers[event_name]

    def publish(self, event: DomainEvent) -> None:
        """
        Publish a domain event to all subscribers.

        Handlers always run on the main thread. A handler that raises is
        logged and does not prevent the remaining handlers from running.

        Args:
            event: DomainEvent instance to publish
        """
        event_name = event.name
        with self._lock:
            handlers = list(self._subscribers.get(event_name, []))

        for handler in handlers:
            call_on_main_thread(self._safe_call_handler, handler, event, label=f"EventBus:{event_name}")

    def _safe_call_handler(self, handler: Callable[[DomainEvent], None], event: DomainEvent) -> None:
        try:
            handler(event)
        except Exception as e:
            Log.error(f"EventBus: Error in handler for '{event.name}': {e}")

    def get_subscriber_count(self, event_name: Union[str, Type[DomainEvent]]) -> int:
        event_name = self._normalize_event_name(event_name)
        with self._lock:
            return len(self._subscribers.get(event_name, []))

    def clear(self) -> None:
        """Clear all subscribers"""
        with self._lock:
            self._subscribers.clear()
        Log.info("EventBus: Cleared all subscribers")
