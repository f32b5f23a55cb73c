"""Exceptions raised by the label engine."""


class LabelEngineError(Exception):
    """Base class for label engine errors."""


class DuplicateNameError(LabelEngineError, ValueError):
    """Raised when registering a detector name that is already taken."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"Detector '{name}' is already registered. "
            "Pass replace=True to override it."
        )


class InvalidDetectorError(LabelEngineError, TypeError):
    """Raised when an object registered as a detector lacks the contract."""
