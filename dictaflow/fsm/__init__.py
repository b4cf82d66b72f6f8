"""Application state machine for the dictation workflow.

The application moves through a strict pipeline and a few nested windows:

    Idle -> Recording -> ProcessingTranscription -> ProcessingGPTFormatting
         -> ProcessingClipboard -> ProcessingComplete
                                        |
                                        v
                        ReformatWithProfile (back to formatting)

    Idle -> SettingsWindowOpen -> New/EditProfileEditorOpen

Stage failures land in error states that wait for AcknowledgeError; Reset
returns to a visible Idle from anywhere.

State and event variants share names (e.g. TranscriptionError), so they are
used through their modules: ``states.TranscriptionError`` and
``events.TranscriptionError``.
"""

from dictaflow.fsm import events, states
from dictaflow.fsm.machine import AppStateMachine, TransitionStats, build_machine
from dictaflow.fsm.notifier import (
    AppStateChanged,
    CallbackSink,
    QueueSink,
    StateChangeNotifier,
    StreamSink,
)
from dictaflow.fsm.transitions import (
    TRANSITIONS,
    InvalidTransition,
    TransitionError,
    allowed_events,
    transition,
)
from dictaflow.fsm.views import ViewFlags, snapshot

__all__ = [
    # Model
    "states",
    "events",
    # Transitions
    "transition",
    "allowed_events",
    "TransitionError",
    "InvalidTransition",
    "TRANSITIONS",
    # Views
    "ViewFlags",
    "snapshot",
    # Notifications
    "AppStateChanged",
    "StateChangeNotifier",
    "CallbackSink",
    "QueueSink",
    "StreamSink",
    # Machine
    "AppStateMachine",
    "TransitionStats",
    "build_machine",
]
