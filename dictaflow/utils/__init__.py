"""Utility modules for dictaflow."""

from dictaflow.utils.logging import (
    configure_logging,
    get_logger,
    get_session_id,
    set_session_id,
)
from dictaflow.utils.result import Err, Ok, Result

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "get_session_id",
    "set_session_id",
    # Result
    "Ok",
    "Err",
    "Result",
]
