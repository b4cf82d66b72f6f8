from pathlib import Path

from dictaflow.config.settings import CONFIG_FILENAME, EngineConfig, load_config
from dictaflow.fsm.notifier import DEFAULT_CHANNEL


def write_config(directory: Path, text: str) -> None:
    (directory / CONFIG_FILENAME).write_text(text)


def test_defaults_without_file(tmp_path):
    config = load_config(tmp_path).unwrap()

    assert config.window.start_visible is True
    assert config.notifications.enabled is True
    assert config.notifications.channel == DEFAULT_CHANNEL
    assert config.logging.level == "info"
    assert config.config_dir == tmp_path


def test_load_from_yaml(tmp_path):
    write_config(tmp_path, """
window:
  start_visible: false
notifications:
  channel: dictation.state
logging:
  level: DEBUG
  format: text
""")

    config = load_config(tmp_path).unwrap()

    assert config.window.start_visible is False
    assert config.notifications.channel == "dictation.state"
    assert config.logging.level == "debug"
    assert config.logging.format == "text"


def test_empty_file_uses_defaults(tmp_path):
    write_config(tmp_path, "")
    assert load_config(tmp_path).unwrap().logging.format == "json"


def test_bad_yaml(tmp_path):
    write_config(tmp_path, "window: [\n")
    error = load_config(tmp_path).unwrap_err()
    assert error.field == "yaml"


def test_top_level_must_be_mapping(tmp_path):
    write_config(tmp_path, "- one\n- two\n")
    assert load_config(tmp_path).unwrap_err().field == "yaml"


def test_section_must_be_mapping():
    error = EngineConfig.from_dict({"logging": "debug"}).unwrap_err()
    assert error.field == "logging"


def test_missing_file():
    error = EngineConfig.from_yaml(Path("/nonexistent/engine.yaml")).unwrap_err()
    assert error.field == "path"


def test_validate_rejects_non_bool(tmp_path):
    write_config(tmp_path, "window:\n  start_visible: sometimes\n")
    error = load_config(tmp_path).unwrap_err()
    assert error.field == "window.start_visible"


def test_validate_rejects_bad_channel(tmp_path):
    write_config(tmp_path, "notifications:\n  channel: 'has spaces'\n")
    assert load_config(tmp_path).unwrap_err().field == "notifications.channel"


def test_validate_rejects_bad_level(tmp_path):
    write_config(tmp_path, "logging:\n  level: loud\n")
    error = load_config(tmp_path).unwrap_err()
    assert error.field == "logging.level"
    assert "Config error in 'logging.level'" in str(error)


def test_validate_rejects_bad_format(tmp_path):
    write_config(tmp_path, "logging:\n  format: xml\n")
    assert load_config(tmp_path).unwrap_err().field == "logging.format"
