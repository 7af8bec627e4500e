"""Exception hierarchy for rllab.

Every error also derives from the closest built-in exception so callers may
catch either the specific rllab error or the generic Python one.
"""


class RLLabError(Exception):
    """Base class for all rllab errors."""


class InvalidAction(RLLabError, ValueError):
    """Raised when stepping with an action outside ``available_actions()``."""

    def __init__(self, action, available_actions):
        self.action = action
        self.available_actions = list(available_actions)
        super().__init__(
            f"action {action} is not available, expected one of {self.available_actions}"
        )


class AlreadyTerminal(RLLabError, RuntimeError):
    """Raised when stepping an environment whose episode is already over."""


class NoAvailableActions(RLLabError, ValueError):
    """Raised when an action must be chosen from an empty action set."""


class ModelUnavailable(RLLabError, NotImplementedError):
    """Raised when a planning algorithm needs a model the environment lacks."""


class SnapshotError(RLLabError, ValueError):
    """Raised for malformed or mismatching algorithm snapshots."""


class NativeLibraryError(RLLabError, OSError):
    """Raised when a native environment library or symbol cannot be loaded."""
