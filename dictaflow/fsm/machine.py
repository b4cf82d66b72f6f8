"""Machine shell owning the live application state."""

from __future__ import annotations

import threading
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Optional

from dictaflow.fsm import views
from dictaflow.fsm.events import AppEvent, Reset, event_name
from dictaflow.fsm.notifier import NotificationSink, StateChangeNotifier
from dictaflow.fsm.states import AppState, StateKind, idle, nesting_depth, state_name
from dictaflow.fsm.transitions import TransitionError, transition
from dictaflow.utils.logging import get_logger
from dictaflow.utils.result import Err, Ok, Result

if TYPE_CHECKING:
    from dictaflow.config.settings import EngineConfig

logger = get_logger("fsm.machine")


class AppStateMachine:
    """
    The single authority on what the application is doing.

    All mutation goes through ``process_event``, which holds one lock while
    it computes the next state, swaps it in and notifies observers, so
    concurrent callers are applied one at a time. Reads take no lock: the
    state is immutable and swapped in with a single assignment, so sinks
    may query views while being notified. Sinks must not feed events back
    into the machine.
    """

    def __init__(
        self,
        initial_state: Optional[AppState] = None,
        notifier: Optional[StateChangeNotifier] = None,
        emit_events: bool = True,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        Initialize the machine.

        Args:
            initial_state: Starting state (visible Idle by default)
            notifier: Where state changes are pushed
            emit_events: Disable to skip notifications entirely
            clock: Timestamp source for new states (UTC now by default)
        """
        self._state: AppState = initial_state if initial_state is not None else idle(True)
        self._lock = threading.Lock()
        self.notifier = notifier
        self.emit_events = emit_events
        self._clock = clock

        self.stats = TransitionStats()

    @property
    def current_state(self) -> AppState:
        """Snapshot of the current state. States are immutable."""
        return self._state

    def current_state_repr(self) -> str:
        return repr(self.current_state)

    def process_event(self, event: AppEvent) -> Result[None, TransitionError]:
        """
        Apply an event to the current state.

        Args:
            event: Event raised by a collaborator or UI action

        Returns:
            Ok(None) once the new state is in place, or Err(InvalidTransition)
            with the state left untouched
        """
        with self._lock:
            previous = self._state
            now = self._clock() if self._clock is not None else None
            result = transition(previous, event, now)

            if result.is_err():
                error = result.unwrap_err()
                self.stats.record_rejected()
                logger.warning(
                    "invalid_transition",
                    from_state=state_name(previous),
                    trigger=event_name(event),
                    error=str(error),
                )
                return Err(error)

            current = result.unwrap()
            self._state = current
            self.stats.record_accepted(current, event)

            logger.info(
                "state_transition",
                from_state=state_name(previous),
                to_state=state_name(current),
                trigger=event_name(event),
                depth=nesting_depth(current),
            )

            if self.emit_events and self.notifier is not None:
                self.notifier.notify(previous, current, event)

            return Ok(None)

    def is_recording(self) -> bool:
        return views.is_recording(self.current_state)

    def is_processing(self) -> bool:
        return views.is_processing(self.current_state)

    def is_main_window_visible(self) -> bool:
        return views.is_main_window_visible(self.current_state)

    def has_modal_window_open(self) -> bool:
        return views.has_modal_window_open(self.current_state)

    def is_error(self) -> bool:
        return views.is_error(self.current_state)

    def error_message(self) -> Optional[str]:
        return views.error_message(self.current_state)

    def view_flags(self) -> views.ViewFlags:
        return views.snapshot(self.current_state)


class TransitionStats:
    """Counters for transitions applied by a machine."""

    def __init__(self) -> None:
        self.accepted: int = 0
        self.rejected: int = 0
        self.resets: int = 0
        self.completed: int = 0
        self.errors: int = 0

    def record_accepted(self, current: AppState, event: AppEvent) -> None:
        self.accepted += 1
        if isinstance(event, Reset):
            self.resets += 1
        elif current.kind is StateKind.COMPLETE:
            self.completed += 1
        elif current.kind is StateKind.ERROR:
            self.errors += 1

    def record_rejected(self) -> None:
        self.rejected += 1

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "accepted": self.accepted,
            "rejected": self.rejected,
            "resets": self.resets,
            "completed": self.completed,
            "errors": self.errors,
        }


def build_machine(
    config: EngineConfig,
    sink: Optional[NotificationSink] = None,
) -> AppStateMachine:
    """
    Build the machine held by the composition root.

    Args:
        config: Loaded engine configuration
        sink: Observer for state changes; notifications are off without one

    Returns:
        A machine resting in Idle
    """
    notifier = None
    if sink is not None:
        notifier = StateChangeNotifier(sink, channel=config.notifications.channel)

    machine = AppStateMachine(
        initial_state=idle(config.window.start_visible),
        notifier=notifier,
        emit_events=config.notifications.enabled,
    )

    logger.debug(
        "machine_built",
        start_visible=config.window.start_visible,
        notifications=config.notifications.enabled and notifier is not None,
    )
    return machine
