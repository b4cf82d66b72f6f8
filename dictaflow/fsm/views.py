"""Read-only views derived from the current application state.

Callers ask these functions instead of inspecting states themselves. Each
view is computed from the state's ``kind`` so a new state only has to pick
a kind to be covered everywhere.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from dictaflow.fsm.states import (
    AppState,
    EditProfileEditorOpen,
    NewProfileEditorOpen,
    SettingsWindowOpen,
    StateKind,
)


def is_recording(state: AppState) -> bool:
    return state.kind is StateKind.RECORDING


def is_processing(state: AppState) -> bool:
    """True for the three in-flight pipeline stages, not for completion."""
    return state.kind is StateKind.PROCESSING


def is_main_window_visible(state: AppState) -> bool:
    """
    Decide whether the main window should be shown.

    Work in flight and a fresh result always keep it visible. Idle and
    error states report their stored flag, settings defers to the state it
    suspended and profile editors are always shown.
    """
    kind = state.kind
    if kind.forces_window_visible():
        return True
    if kind is StateKind.MODAL:
        if isinstance(state, SettingsWindowOpen):
            return is_main_window_visible(state.previous_state)
        if isinstance(state, (NewProfileEditorOpen, EditProfileEditorOpen)):
            return True
    if kind in (StateKind.IDLE, StateKind.ERROR):
        return state.main_window_visible
    raise TypeError(f"Unhandled state: {state!r}")


def has_modal_window_open(state: AppState) -> bool:
    return state.kind is StateKind.MODAL


def is_error(state: AppState) -> bool:
    return state.kind is StateKind.ERROR


def error_message(state: AppState) -> Optional[str]:
    """Return the failure message of an error state, None otherwise."""
    if is_error(state):
        return state.error
    return None


@dataclass(frozen=True)
class ViewFlags:
    """Snapshot of the derived views for one state."""

    is_recording: bool
    is_processing: bool
    main_window_visible: bool
    has_modal_window: bool

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "is_recording": self.is_recording,
            "is_processing": self.is_processing,
            "main_window_visible": self.main_window_visible,
            "has_modal_window": self.has_modal_window,
        }


def snapshot(state: AppState) -> ViewFlags:
    """Evaluate every view against ``state``."""
    return ViewFlags(
        is_recording=is_recording(state),
        is_processing=is_processing(state),
        main_window_visible=is_main_window_visible(state),
        has_modal_window=has_modal_window_open(state),
    )
