"""Events that trigger application state transitions."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Union, get_type_hints

from dictaflow.utils.result import Err, EventParseError, Ok, Result

# Profile used when the transcription collaborator does not name one
DEFAULT_PROFILE_ID = "default"


# Recording events


@dataclass(frozen=True)
class StartRecording:
    """Start a new capture session."""


@dataclass(frozen=True)
class StopRecording:
    """Stop capturing; ``wav_path`` is the finished recording."""

    wav_path: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "wav_path", Path(self.wav_path))


@dataclass(frozen=True)
class CancelRecording:
    """Discard the capture without entering the pipeline."""


# Window management events


@dataclass(frozen=True)
class ShowMainWindow:
    """Bring the main window to the front."""


@dataclass(frozen=True)
class HideMainWindow:
    """Hide the main window, leaving the app running."""


@dataclass(frozen=True)
class OpenSettingsWindow:
    """Open settings over the current resting state."""


@dataclass(frozen=True)
class CloseSettingsWindow:
    """Close settings and restore the state it was opened over."""


@dataclass(frozen=True)
class SaveSettings:
    """Settings were written by the settings collaborator."""


# Profile management events


@dataclass(frozen=True)
class StartNewProfile:
    """Open the editor for a profile that does not exist yet."""


@dataclass(frozen=True)
class StartEditProfile:
    """Open the editor for an existing profile."""

    profile_id: str


@dataclass(frozen=True)
class SaveProfile:
    """Editor saved; ``profile_data`` is the serialized profile."""

    profile_data: str = ""


@dataclass(frozen=True)
class CancelProfileEdit:
    """Leave the editor without saving."""


@dataclass(frozen=True)
class DeleteProfile:
    """Delete the profile being edited."""

    profile_id: str


@dataclass(frozen=True)
class SelectProfile:
    """Activate a profile. Ignored while recording."""

    profile_id: str


# Pipeline completion events


@dataclass(frozen=True)
class TranscriptionComplete:
    """Speech-to-text finished; formatting starts with ``profile_id``."""

    transcript: str
    profile_id: str = DEFAULT_PROFILE_ID


@dataclass(frozen=True)
class GPTFormattingComplete:
    """Formatting returned the text to copy."""

    formatted_text: str


@dataclass(frozen=True)
class ClipboardCopyComplete:
    """The final text is on the clipboard."""


@dataclass(frozen=True)
class ReformatWithProfile:
    """Replay the original transcript through formatting with another profile."""

    profile_id: str


@dataclass(frozen=True)
class SkipFormattingToClipboard:
    """Bypass formatting for profiles that copy the raw transcript."""

    transcript: str


# Failure events


@dataclass(frozen=True)
class TranscriptionError:
    """Speech-to-text failed."""

    error: str


@dataclass(frozen=True)
class GPTFormattingError:
    """Formatting failed."""

    error: str


@dataclass(frozen=True)
class ClipboardError:
    """Copying to the clipboard failed."""

    error: str


@dataclass(frozen=True)
class ProfileValidationError:
    """A profile in the editor was rejected."""

    error: str


# System events


@dataclass(frozen=True)
class Reset:
    """Unconditional return to a visible idle window."""


@dataclass(frozen=True)
class AcknowledgeError:
    """User dismissed the current error."""


AppEvent = Union[
    StartRecording,
    StopRecording,
    CancelRecording,
    ShowMainWindow,
    HideMainWindow,
    OpenSettingsWindow,
    CloseSettingsWindow,
    SaveSettings,
    StartNewProfile,
    StartEditProfile,
    SaveProfile,
    CancelProfileEdit,
    DeleteProfile,
    SelectProfile,
    TranscriptionComplete,
    GPTFormattingComplete,
    ClipboardCopyComplete,
    ReformatWithProfile,
    SkipFormattingToClipboard,
    TranscriptionError,
    GPTFormattingError,
    ClipboardError,
    ProfileValidationError,
    Reset,
    AcknowledgeError,
]

ALL_EVENT_TYPES: tuple[type, ...] = (
    StartRecording,
    StopRecording,
    CancelRecording,
    ShowMainWindow,
    HideMainWindow,
    OpenSettingsWindow,
    CloseSettingsWindow,
    SaveSettings,
    StartNewProfile,
    StartEditProfile,
    SaveProfile,
    CancelProfileEdit,
    DeleteProfile,
    SelectProfile,
    TranscriptionComplete,
    GPTFormattingComplete,
    ClipboardCopyComplete,
    ReformatWithProfile,
    SkipFormattingToClipboard,
    TranscriptionError,
    GPTFormattingError,
    ClipboardError,
    ProfileValidationError,
    Reset,
    AcknowledgeError,
)

EVENT_TYPES_BY_NAME: dict[str, type] = {cls.__name__: cls for cls in ALL_EVENT_TYPES}

# Script values accepted per field annotation
_ACCEPTED_VALUE_TYPES: dict[type, tuple[type, ...]] = {
    str: (str,),
    Path: (str, Path),
}


def event_name(event: AppEvent) -> str:
    """Return the variant name of an event."""
    return type(event).__name__


def event_fields(event_type: type) -> dict[str, Optional[Any]]:
    """
    Describe the fields of an event type.

    Returns:
        Mapping of field name to its default, or None for required fields
    """
    described: dict[str, Optional[Any]] = {}
    for f in dataclasses.fields(event_type):
        if f.default is dataclasses.MISSING:
            described[f.name] = None
        else:
            described[f.name] = f.default
    return described


def parse_event(
    name: str,
    data: Optional[Mapping[str, Any]] = None,
) -> Result[AppEvent, EventParseError]:
    """
    Build an event from its variant name and field values.

    Args:
        name: Event class name, e.g. "StopRecording"
        data: Field values; None or empty for field-less events

    Returns:
        Result with the event or a parse error
    """
    event_type = EVENT_TYPES_BY_NAME.get(name)
    if event_type is None:
        return Err(EventParseError(name=name, message="Unknown event"))

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        return Err(EventParseError(
            name=name,
            message=f"Fields must be a mapping, got {type(data).__name__}",
        ))

    known = {f.name for f in dataclasses.fields(event_type)}
    unknown = sorted(set(data) - known)
    if unknown:
        return Err(EventParseError(
            name=name,
            message=f"Unknown fields: {', '.join(unknown)}",
        ))

    hints = get_type_hints(event_type)
    for key, value in data.items():
        accepted = _ACCEPTED_VALUE_TYPES[hints[key]]
        if not isinstance(value, accepted):
            return Err(EventParseError(
                name=name,
                message=(
                    f"Field '{key}' must be a string, "
                    f"got {type(value).__name__} {value!r}"
                ),
            ))

    try:
        return Ok(event_type(**data))
    except TypeError as e:
        return Err(EventParseError(name=name, message=str(e)))
