"""
Error types raised by the policy generation pipeline.

Every failure is terminal for a single run and is raised unchanged to the
caller. Lower-level causes are chained with ``raise ... from``.
"""


class SCPGuardError(Exception):
    """Base class for all pipeline failures."""


class InvalidModeError(SCPGuardError):
    """Raised when the policy mode is not Allow or Deny."""
    def __init__(self, mode: str):
        super().__init__(f"scp type must be Allow or Deny, got {mode!r}")
        self.mode = mode


class InputUnavailableError(SCPGuardError):
    """Raised when the scanner report cannot be read."""
    def __init__(self, location: str):
        super().__init__(f"scanner report unavailable: {location}")
        self.location = location


class ParseError(SCPGuardError):
    """Raised when a scanner report or policy document is malformed."""


class ValidationError(SCPGuardError):
    """Raised when a pipeline parameter is out of range."""


class PersistenceError(SCPGuardError):
    """Raised when a policy document cannot be serialized or written."""
