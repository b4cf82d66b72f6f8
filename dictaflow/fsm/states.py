"""Application state definitions for the dictation state machine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import ClassVar, Optional, Union


class StateKind(Enum):
    """Coarse classification every application state belongs to."""

    # Resting state
    IDLE = auto()

    # Capture in progress
    RECORDING = auto()

    # Pipeline stages awaiting a collaborator
    PROCESSING = auto()

    # Pipeline finished successfully
    COMPLETE = auto()

    # Settings and profile editor windows
    MODAL = auto()

    # Stage failures waiting for acknowledgement
    ERROR = auto()

    def forces_window_visible(self) -> bool:
        """Check if states of this kind always keep the main window shown."""
        return self in (
            StateKind.RECORDING,
            StateKind.PROCESSING,
            StateKind.COMPLETE,
        )


@dataclass(frozen=True)
class Idle:
    """Resting state, ready to record."""

    kind: ClassVar[StateKind] = StateKind.IDLE

    main_window_visible: bool = True


@dataclass(frozen=True)
class Recording:
    """A capture session exists in the audio collaborator."""

    kind: ClassVar[StateKind] = StateKind.RECORDING

    started_at: datetime


@dataclass(frozen=True)
class ProcessingTranscription:
    """Awaiting the transcript of a recorded file."""

    kind: ClassVar[StateKind] = StateKind.PROCESSING

    wav_path: Path
    started_at: datetime


@dataclass(frozen=True)
class ProcessingGPTFormatting:
    """Awaiting reformatting of the untouched transcript."""

    kind: ClassVar[StateKind] = StateKind.PROCESSING

    original_transcript: str
    profile_id: str
    started_at: datetime


@dataclass(frozen=True)
class ProcessingClipboard:
    """Awaiting the clipboard write of ``text``."""

    kind: ClassVar[StateKind] = StateKind.PROCESSING

    # Kept so the result can be reformatted once the copy completes
    original_transcript: str
    text: str
    started_at: datetime


@dataclass(frozen=True)
class ProcessingComplete:
    """Pipeline finished; enough is kept to start fresh or reformat."""

    kind: ClassVar[StateKind] = StateKind.COMPLETE

    original_transcript: str
    final_text: str
    profile_id: Optional[str]
    completed_at: datetime


@dataclass(frozen=True)
class SettingsWindowOpen:
    """Settings window open, suspending ``previous_state``."""

    kind: ClassVar[StateKind] = StateKind.MODAL

    previous_state: "AppState"


@dataclass(frozen=True)
class NewProfileEditorOpen:
    """Profile editor creating a new profile, opened from settings."""

    kind: ClassVar[StateKind] = StateKind.MODAL

    settings_context: SettingsWindowOpen


@dataclass(frozen=True)
class EditProfileEditorOpen:
    """Profile editor editing ``profile_id``, opened from settings."""

    kind: ClassVar[StateKind] = StateKind.MODAL

    profile_id: str
    settings_context: SettingsWindowOpen


@dataclass(frozen=True)
class TranscriptionError:
    """Transcription failed; the recording is kept."""

    kind: ClassVar[StateKind] = StateKind.ERROR

    error: str
    wav_path: Path
    main_window_visible: bool = True


@dataclass(frozen=True)
class GPTFormattingError:
    """Formatting failed; the original transcript is kept."""

    kind: ClassVar[StateKind] = StateKind.ERROR

    error: str
    transcript: str
    main_window_visible: bool = True


@dataclass(frozen=True)
class ClipboardError:
    """Clipboard write failed; the text to copy is kept."""

    kind: ClassVar[StateKind] = StateKind.ERROR

    error: str
    text: str
    main_window_visible: bool = True


@dataclass(frozen=True)
class ProfileValidationError:
    """A profile failed validation in the editor."""

    kind: ClassVar[StateKind] = StateKind.ERROR

    error: str
    main_window_visible: bool = True


AppState = Union[
    Idle,
    Recording,
    ProcessingTranscription,
    ProcessingGPTFormatting,
    ProcessingClipboard,
    ProcessingComplete,
    SettingsWindowOpen,
    NewProfileEditorOpen,
    EditProfileEditorOpen,
    TranscriptionError,
    GPTFormattingError,
    ClipboardError,
    ProfileValidationError,
]

# The closed set of states, in pipeline order
ALL_STATE_TYPES: tuple[type, ...] = (
    Idle,
    Recording,
    ProcessingTranscription,
    ProcessingGPTFormatting,
    ProcessingClipboard,
    ProcessingComplete,
    SettingsWindowOpen,
    NewProfileEditorOpen,
    EditProfileEditorOpen,
    TranscriptionError,
    GPTFormattingError,
    ClipboardError,
    ProfileValidationError,
)

ERROR_STATE_TYPES: tuple[type, ...] = tuple(
    cls for cls in ALL_STATE_TYPES if cls.kind is StateKind.ERROR
)


def state_name(state: AppState) -> str:
    """Return the variant name of a state."""
    return type(state).__name__


def nesting_depth(state: AppState) -> int:
    """Count how many window contexts are stacked on top of a base state."""
    depth = 0
    while True:
        if isinstance(state, SettingsWindowOpen):
            state = state.previous_state
        elif isinstance(state, (NewProfileEditorOpen, EditProfileEditorOpen)):
            state = state.settings_context
        else:
            return depth
        depth += 1


def idle(main_window_visible: bool = True) -> Idle:
    """Shorthand for the state the machine starts and resets to."""
    return Idle(main_window_visible=main_window_visible)
