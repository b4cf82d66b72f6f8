import pytest

from dictaflow.fsm import states, views
from tests.builders import T0, WAV, sample_states, settings_over


def test_idle_reports_stored_visibility():
    assert views.is_main_window_visible(states.Idle(True))
    assert not views.is_main_window_visible(states.Idle(False))


@pytest.mark.parametrize(
    "state",
    [
        states.Recording(started_at=T0),
        states.ProcessingTranscription(wav_path=WAV, started_at=T0),
        states.ProcessingGPTFormatting(original_transcript="t", profile_id="p", started_at=T0),
        states.ProcessingClipboard(original_transcript="t", text="t", started_at=T0),
        states.ProcessingComplete(
            original_transcript="t", final_text="t", profile_id=None, completed_at=T0
        ),
    ],
    ids=repr,
)
def test_pipeline_states_force_visible_window(state):
    assert views.is_main_window_visible(state)


def test_settings_window_defers_to_suspended_state():
    assert not views.is_main_window_visible(settings_over(states.Idle(False)))
    assert views.is_main_window_visible(settings_over(states.Idle(True)))


def test_profile_editors_always_show_window():
    hidden_settings = settings_over(states.Idle(False))
    assert views.is_main_window_visible(
        states.NewProfileEditorOpen(settings_context=hidden_settings)
    )
    assert views.is_main_window_visible(
        states.EditProfileEditorOpen(profile_id="p", settings_context=hidden_settings)
    )


def test_error_states_report_stored_visibility():
    assert not views.is_main_window_visible(
        states.ClipboardError(error="e", text="t", main_window_visible=False)
    )
    assert views.is_main_window_visible(
        states.ProfileValidationError(error="e", main_window_visible=True)
    )


def test_recording_and_processing_are_disjoint():
    for state in sample_states():
        assert not (views.is_recording(state) and views.is_processing(state))


def test_processing_excludes_completion():
    complete = states.ProcessingComplete(
        original_transcript="t", final_text="t", profile_id=None, completed_at=T0
    )
    assert not views.is_processing(complete)
    assert views.is_processing(
        states.ProcessingClipboard(original_transcript="t", text="t", started_at=T0)
    )


def test_modal_flag():
    modal = [s for s in sample_states() if views.has_modal_window_open(s)]
    assert {type(s) for s in modal} == {
        states.SettingsWindowOpen,
        states.NewProfileEditorOpen,
        states.EditProfileEditorOpen,
    }


def test_error_message_only_for_error_states():
    for state in sample_states():
        if isinstance(state, states.ERROR_STATE_TYPES):
            assert views.is_error(state)
            assert views.error_message(state) == state.error
        else:
            assert not views.is_error(state)
            assert views.error_message(state) is None


def test_every_state_has_a_visibility_answer():
    for state in sample_states():
        assert isinstance(views.is_main_window_visible(state), bool)


def test_snapshot_to_dict():
    flags = views.snapshot(states.Recording(started_at=T0))
    assert flags.to_dict() == {
        "is_recording": True,
        "is_processing": False,
        "main_window_visible": True,
        "has_modal_window": False,
    }
