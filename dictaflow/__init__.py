"""Dictation workflow engine built around an application state machine."""

__version__ = "0.1.0"
