"""Headless driver that feeds a scripted event sequence through a machine.

A script is a YAML list. Field-less events are plain names, events with
fields are single-key mappings::

    - StartRecording
    - StopRecording: {wav_path: /tmp/take-1.wav}
    - TranscriptionComplete: {transcript: hello}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from dictaflow.fsm.events import AppEvent, event_name, parse_event
from dictaflow.fsm.machine import AppStateMachine
from dictaflow.utils.logging import get_logger, set_session_id
from dictaflow.utils.result import Err, EventParseError, Ok, Result

logger = get_logger("fsm.replay")


def parse_script(data: Any) -> Result[list[AppEvent], EventParseError]:
    """
    Turn loaded YAML into events.

    Args:
        data: List of event names or single-key mappings

    Returns:
        Result with the events or the first parse error
    """
    if data is None:
        return Ok([])
    if not isinstance(data, list):
        return Err(EventParseError(
            name="<script>",
            message=f"Script must be a list of events, got {type(data).__name__}",
        ))

    parsed: list[AppEvent] = []
    for position, item in enumerate(data):
        if isinstance(item, str):
            name, fields = item, None
        elif isinstance(item, dict) and len(item) == 1:
            name, fields = next(iter(item.items()))
        else:
            return Err(EventParseError(
                name=str(item),
                message="Expected an event name or a single-key mapping",
                position=position,
            ))

        result = parse_event(str(name), fields)
        if result.is_err():
            error = result.unwrap_err()
            return Err(EventParseError(
                name=error.name,
                message=error.message,
                position=position,
            ))
        parsed.append(result.unwrap())

    return Ok(parsed)


def load_script(path: Path) -> Result[list[AppEvent], EventParseError]:
    """Read and parse a YAML event script."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        return Err(EventParseError(name=str(path), message=f"Failed to read script: {e}"))

    return parse_script(data)


@dataclass
class ReplayReport:
    """Outcome of feeding a script through a machine."""

    applied: int = 0
    rejected: list[dict] = field(default_factory=list)
    stopped_early: bool = False

    @property
    def success(self) -> bool:
        return not self.rejected

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "applied": self.applied,
            "rejected": list(self.rejected),
            "stopped_early": self.stopped_early,
        }


def replay(
    machine: AppStateMachine,
    script: list[AppEvent],
    keep_going: bool = False,
    session_id: Optional[str] = None,
) -> ReplayReport:
    """
    Feed events to a machine in order.

    Args:
        machine: Machine to drive
        script: Events to apply
        keep_going: Continue past rejected events instead of stopping
        session_id: Session ID bound to the replay's log lines

    Returns:
        ReplayReport describing what was applied
    """
    if session_id:
        set_session_id(session_id)

    report = ReplayReport()
    logger.info("replay_started", events=len(script))

    for position, event in enumerate(script):
        result = machine.process_event(event)
        if result.is_ok():
            report.applied += 1
            continue

        report.rejected.append({
            "position": position,
            "event": event_name(event),
            "error": str(result.unwrap_err()),
        })
        if not keep_going:
            report.stopped_early = position < len(script) - 1
            break

    logger.info(
        "replay_finished",
        applied=report.applied,
        rejected=len(report.rejected),
    )
    return report
