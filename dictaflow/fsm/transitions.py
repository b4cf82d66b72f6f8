"""Transition table for the dictation state machine.

Every legal move is a small rule function registered against a
``(state type, event type)`` pair. ``transition`` looks the pair up and
falls back to two universal rules: ``Reset`` is accepted from anywhere,
everything else is rejected with ``InvalidTransition``. The function is
shared by the live machine shell and any headless caller.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Union

from dictaflow.fsm import events, states
from dictaflow.fsm.events import AppEvent
from dictaflow.fsm.states import AppState
from dictaflow.utils.result import Err, Ok, Result

Rule = Callable[[AppState, AppEvent, datetime], AppState]

# Valid transitions keyed by (state type, event type)
TRANSITIONS: dict[tuple[type, type], Rule] = {}


class TransitionError(Exception):
    """Base class for state machine errors."""


class InvalidTransition(TransitionError):
    """No rule accepts the event in the current state."""

    def __init__(self, from_state: str, to_state: str, event: str) -> None:
        self.from_state = from_state
        self.to_state = to_state
        self.event = event
        super().__init__(
            f"Invalid state transition: cannot go from {from_state} "
            f"to {to_state} with event {event}"
        )


def _types(types: Union[type, tuple[type, ...]]) -> tuple[type, ...]:
    return types if isinstance(types, tuple) else (types,)


def _on(
    state_types: Union[type, tuple[type, ...]],
    event_types: Union[type, tuple[type, ...]],
) -> Callable[[Rule], Rule]:
    """Register a rule for every combination of the given types."""

    def register(rule: Rule) -> Rule:
        for state_type in _types(state_types):
            for event_type in _types(event_types):
                key = (state_type, event_type)
                if key in TRANSITIONS:
                    raise ValueError(
                        f"Duplicate rule for {state_type.__name__} + {event_type.__name__}"
                    )
                TRANSITIONS[key] = rule
        return rule

    return register


def _unchanged(state: AppState, event: AppEvent, now: datetime) -> AppState:
    return state


# === Idle and window visibility ===


@_on((states.Idle, states.ProcessingComplete), events.StartRecording)
def _start_recording(state, event, now):
    return states.Recording(started_at=now)


@_on(states.Idle, events.ShowMainWindow)
def _show_main_window(state, event, now):
    return states.idle(True)


@_on(states.Idle, events.HideMainWindow)
def _hide_main_window(state, event, now):
    return states.idle(False)


@_on((states.Idle, states.ProcessingComplete), events.OpenSettingsWindow)
def _open_settings(state, event, now):
    return states.SettingsWindowOpen(previous_state=state)


# Profile selection is tracked outside the machine; while recording the
# switch is deliberately ignored rather than rejected.
_on((states.Idle, states.Recording), events.SelectProfile)(_unchanged)


# === Recording ===


@_on(states.Recording, events.StopRecording)
def _stop_recording(state, event, now):
    return states.ProcessingTranscription(wav_path=event.wav_path, started_at=now)


@_on(states.Recording, events.CancelRecording)
def _cancel_recording(state, event, now):
    return states.idle(True)


# === Pipeline stages ===


@_on(states.ProcessingTranscription, events.TranscriptionComplete)
def _transcribed(state, event, now):
    return states.ProcessingGPTFormatting(
        original_transcript=event.transcript,
        profile_id=event.profile_id,
        started_at=now,
    )


@_on(states.ProcessingTranscription, events.SkipFormattingToClipboard)
def _skip_formatting(state, event, now):
    return states.ProcessingClipboard(
        original_transcript=event.transcript,
        text=event.transcript,
        started_at=now,
    )


@_on(states.ProcessingTranscription, events.TranscriptionError)
def _transcription_failed(state, event, now):
    return states.TranscriptionError(
        error=event.error,
        wav_path=state.wav_path,
        main_window_visible=True,
    )


@_on(states.ProcessingGPTFormatting, events.GPTFormattingComplete)
def _formatted(state, event, now):
    return states.ProcessingClipboard(
        original_transcript=state.original_transcript,
        text=event.formatted_text,
        started_at=now,
    )


@_on(states.ProcessingGPTFormatting, events.GPTFormattingError)
def _formatting_failed(state, event, now):
    return states.GPTFormattingError(
        error=event.error,
        transcript=state.original_transcript,
        main_window_visible=True,
    )


@_on(states.ProcessingClipboard, events.ClipboardCopyComplete)
def _copied(state, event, now):
    return states.ProcessingComplete(
        original_transcript=state.original_transcript,
        final_text=state.text,
        profile_id=None,
        completed_at=now,
    )


@_on(states.ProcessingClipboard, events.ClipboardError)
def _copy_failed(state, event, now):
    return states.ClipboardError(
        error=event.error,
        text=state.text,
        main_window_visible=True,
    )


@_on(states.ProcessingComplete, events.ReformatWithProfile)
def _reformat(state, event, now):
    # Never re-records or re-transcribes
    return states.ProcessingGPTFormatting(
        original_transcript=state.original_transcript,
        profile_id=event.profile_id,
        started_at=now,
    )


# === Settings and profile editors ===


@_on(states.SettingsWindowOpen, events.CloseSettingsWindow)
def _close_settings(state, event, now):
    return state.previous_state


_on(states.SettingsWindowOpen, events.SaveSettings)(_unchanged)


@_on(states.SettingsWindowOpen, events.StartNewProfile)
def _new_profile(state, event, now):
    return states.NewProfileEditorOpen(settings_context=state)


@_on(states.SettingsWindowOpen, events.StartEditProfile)
def _edit_profile(state, event, now):
    return states.EditProfileEditorOpen(profile_id=event.profile_id, settings_context=state)


# The editor applies save/delete side effects before raising the event
@_on(
    (states.NewProfileEditorOpen, states.EditProfileEditorOpen),
    (events.SaveProfile, events.CancelProfileEdit),
)
def _close_editor(state, event, now):
    return state.settings_context


_on(states.EditProfileEditorOpen, events.DeleteProfile)(_close_editor)


@_on(
    (states.NewProfileEditorOpen, states.EditProfileEditorOpen),
    events.ProfileValidationError,
)
def _profile_invalid(state, event, now):
    return states.ProfileValidationError(error=event.error, main_window_visible=True)


# === Error acknowledgement ===


@_on(states.ERROR_STATE_TYPES, events.AcknowledgeError)
def _acknowledge(state, event, now):
    return states.idle(state.main_window_visible)


def transition(
    state: AppState,
    event: AppEvent,
    now: Optional[datetime] = None,
) -> Result[AppState, TransitionError]:
    """
    Compute the state that follows ``state`` when ``event`` happens.

    Args:
        state: Current state
        event: Triggering event
        now: Timestamp for states that record one (defaults to UTC now)

    Returns:
        Ok with the next state, or Err(InvalidTransition)
    """
    if now is None:
        now = datetime.now(timezone.utc)

    rule = TRANSITIONS.get((type(state), type(event)))
    if rule is not None:
        return Ok(rule(state, event, now))

    if isinstance(event, events.Reset):
        return Ok(states.idle(True))

    return Err(InvalidTransition(
        from_state=repr(state),
        to_state="unknown",
        event=repr(event),
    ))


def allowed_events(state_type: type) -> list[type]:
    """List the event types accepted by a state type, ``Reset`` included."""
    accepted = [
        event_type
        for (rule_state, event_type) in TRANSITIONS
        if rule_state is state_type
    ]
    if events.Reset not in accepted:
        accepted.append(events.Reset)
    return accepted


def rules() -> Iterable[tuple[str, str, str]]:
    """Yield (state, event, rule) names for every explicit rule."""
    for (state_type, event_type), rule in TRANSITIONS.items():
        yield state_type.__name__, event_type.__name__, rule.__name__.lstrip("_")
