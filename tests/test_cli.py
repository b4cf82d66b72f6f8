import json

import pytest
from click.testing import CliRunner

from dictaflow.cli import cli
from dictaflow.utils.result import ExitCode


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, tmp_path):
    def _invoke(*args):
        return runner.invoke(
            cli, ["--config", str(tmp_path), "--log-level", "error", *args]
        )
    return _invoke


def summary(output: str) -> dict:
    return json.loads(output[output.index("{\n"):])


def notifications(output: str) -> list[dict]:
    return [json.loads(line) for line in output.splitlines() if line.startswith('{"channel"')]


def write_script(tmp_path, text):
    path = tmp_path / "script.yaml"
    path.write_text(text)
    return str(path)


def test_events_lists_fields(invoke):
    result = invoke("events")

    assert result.exit_code == 0
    listed = json.loads(result.stdout)
    assert listed["StopRecording"] == {"wav_path": None}
    assert listed["TranscriptionComplete"]["profile_id"] == "default"
    assert len(listed) == 25


def test_table_lists_rules(invoke):
    result = invoke("table")

    assert result.exit_code == 0
    rules = json.loads(result.stdout)
    assert {"state": "Idle", "event": "StartRecording", "rule": "start_recording"} in rules


def test_table_for_one_state(invoke):
    result = invoke("table", "--state", "ClipboardError")

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {
        "state": "ClipboardError",
        "events": ["AcknowledgeError", "Reset"],
    }


def test_table_unknown_state(invoke):
    result = invoke("table", "--state", "Dreaming")
    assert result.exit_code == ExitCode.GENERAL_ERROR


def test_replay_success(invoke, tmp_path):
    script = write_script(tmp_path, """
- StartRecording
- StopRecording: {wav_path: /tmp/take.wav}
- TranscriptionComplete: {transcript: hello}
- GPTFormattingComplete: {formatted_text: Hello.}
- ClipboardCopyComplete
""")

    result = invoke("replay", script)

    assert result.exit_code == 0
    report = summary(result.stdout)
    assert report["status"] == "success"
    assert report["applied"] == 5
    assert report["final_state"].startswith("ProcessingComplete(")
    assert report["views"]["main_window_visible"] is True
    assert report["stats"]["completed"] == 1

    sent = notifications(result.stdout)
    assert len(sent) == 5
    assert sent[0]["channel"] == "app-state-changed"
    assert sent[-1]["context"]["is_processing"] is False


def test_replay_quiet_has_no_notifications(invoke, tmp_path):
    script = write_script(tmp_path, "- HideMainWindow\n")

    result = invoke("replay", "--quiet", script)

    assert result.exit_code == 0
    assert notifications(result.stdout) == []
    assert summary(result.stdout)["views"]["main_window_visible"] is False


def test_replay_rejection(invoke, tmp_path):
    script = write_script(tmp_path, "- StartRecording\n- ClipboardCopyComplete\n- Reset\n")

    result = invoke("replay", "--quiet", script)

    assert result.exit_code == ExitCode.TRANSITION_REJECTED
    report = summary(result.stdout)
    assert report["status"] == "rejected"
    assert report["stopped_early"] is True
    assert report["rejected"][0]["event"] == "ClipboardCopyComplete"


def test_replay_keep_going(invoke, tmp_path):
    script = write_script(tmp_path, "- StartRecording\n- ClipboardCopyComplete\n- Reset\n")

    result = invoke("replay", "--quiet", "--keep-going", script)

    assert result.exit_code == 0
    report = summary(result.stdout)
    assert report["applied"] == 2
    assert report["final_state"] == "Idle(main_window_visible=True)"


def test_replay_bad_script(invoke, tmp_path):
    script = write_script(tmp_path, "- StartRecording\n- Teleport\n")

    result = invoke("replay", script)

    assert result.exit_code == ExitCode.SCRIPT_INVALID
    assert "Teleport" in json.loads(result.stdout)["message"]


def test_config_drives_initial_state(invoke, tmp_path):
    (tmp_path / "engine.yaml").write_text("window:\n  start_visible: false\n")
    script = write_script(tmp_path, "- OpenSettingsWindow\n")

    result = invoke("replay", "--quiet", script)

    assert result.exit_code == 0
    assert summary(result.stdout)["views"] == {
        "is_recording": False,
        "is_processing": False,
        "main_window_visible": False,
        "has_modal_window": True,
    }


def test_invalid_config(invoke, tmp_path):
    (tmp_path / "engine.yaml").write_text("logging:\n  level: loud\n")

    result = invoke("events")

    assert result.exit_code == ExitCode.CONFIG_INVALID
    assert json.loads(result.stdout)["status"] == "error"


def test_replay_logs_transitions_to_stderr(runner, tmp_path):
    script = write_script(tmp_path, "- StartRecording\n- CancelRecording\n")

    result = runner.invoke(
        cli,
        ["--config", str(tmp_path), "--log-level", "info", "replay", "--quiet", script],
    )

    assert result.exit_code == 0
    logged = [json.loads(line) for line in result.stderr.splitlines()]
    transitions = [line for line in logged if line["event"] == "state_transition"]
    assert [line["trigger"] for line in transitions] == ["StartRecording", "CancelRecording"]
    assert transitions[0]["to_state"] == "Recording"
    assert summary(result.stdout)["applied"] == 2
