import pytest

from dictaflow.utils.result import (
    ConfigError,
    Err,
    EventParseError,
    Ok,
    ResultError,
)


def test_ok():
    result = Ok(2)
    assert result.is_ok() and not result.is_err()
    assert result.unwrap() == 2
    assert result.unwrap_or(5) == 2
    assert result.map(lambda v: v * 3) == Ok(6)
    assert result.and_then(lambda v: Err(f"bad {v}")) == Err("bad 2")
    with pytest.raises(ResultError):
        result.unwrap_err()


def test_err():
    result = Err("nope")
    assert result.is_err() and not result.is_ok()
    assert result.unwrap_err() == "nope"
    assert result.unwrap_or(5) == 5
    assert result.map(lambda v: v * 3) is result
    assert result.and_then(lambda v: Ok(v)) is result
    with pytest.raises(ResultError):
        result.unwrap()


def test_error_messages():
    assert str(ConfigError(field="a", message="b")) == "Config error in 'a': b"
    assert str(EventParseError(name="X", message="m")) == "Event 'X': m"
    assert str(EventParseError(name="X", message="m", position=3)) == "Event #3 'X': m"
