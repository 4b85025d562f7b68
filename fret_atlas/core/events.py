"""Event system for Fret Atlas components."""

from typing import Dict, List, Callable, Any
from enum import Enum, auto

from ..logger import get_logger

logger = get_logger(__name__)


class ReferenceEventType(Enum):
    """Event types the reference facade emits to the UI."""

    NOTE_SELECTED = auto()
    SELECTION_CLEARED = auto()
    DISPLAY_MODE_CHANGED = auto()


class EventEmitter:
    """Event emitter for Fret Atlas components."""

    def __init__(self):
        """Initialize the event emitter."""
        self._listeners: Dict[Any, List[Callable]] = {}

    def on(self, event_type: Any, callback: Callable) -> None:
        """Register a callback for an event type.

        Args:
            event_type: Event type to listen for
            callback: Function to call when the event occurs
        """
        if event_type not in self._listeners:
            self._listeners[event_type] = []

        if callback not in self._listeners[event_type]:
            self._listeners[event_type].append(callback)
            logger.debug(f"Added listener for event {event_type}")

    def off(self, event_type: Any, callback: Callable) -> None:
        """Remove a previously registered callback, if present."""
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)

    def emit(self, event_type: Any, *args, **kwargs) -> None:
        """Emit an event.

        A failing listener is logged and does not stop the others.

        Args:
            event_type: Event type to emit
            *args: Positional arguments to pass to listeners
            **kwargs: Keyword arguments to pass to listeners
        """
        if event_type not in self._listeners:
            return

        for callback in list(self._listeners[event_type]):
            try:
                callback(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in event listener for {event_type}: {e}", exc_info=True)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners = {}
        logger.debug("Cleared all event listeners")


class ReferenceEvents:
    """Event emitter specifically for note reference events."""

    def __init__(self):
        """Initialize the reference events."""
        self._emitter = EventEmitter()

    def on_note_selected(self, callback: Callable) -> None:
        """Register a callback taking the NoteSelection of each selected note."""
        self._emitter.on(ReferenceEventType.NOTE_SELECTED, callback)

    def on_selection_cleared(self, callback: Callable) -> None:
        """Register a callback taking the default (title, text) pair."""
        self._emitter.on(ReferenceEventType.SELECTION_CLEARED, callback)

    def on_display_mode_changed(self, callback: Callable) -> None:
        """Register a callback taking the new DisplayMode."""
        self._emitter.on(ReferenceEventType.DISPLAY_MODE_CHANGED, callback)

    def emit_note_selected(self, selection) -> None:
        self._emitter.emit(ReferenceEventType.NOTE_SELECTED, selection)

    def emit_selection_cleared(self, title: str, text: str) -> None:
        self._emitter.emit(ReferenceEventType.SELECTION_CLEARED, title, text)

    def emit_display_mode_changed(self, mode) -> None:
        self._emitter.emit(ReferenceEventType.DISPLAY_MODE_CHANGED, mode)

    def clear(self) -> None:
        """Remove all event listeners."""
        self._emitter.clear()
