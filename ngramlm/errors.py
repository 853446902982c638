"""
Errors and Diagnostics

Configuration errors abort a run before any training happens. Numerical
problems found while scoring are recorded as Diagnostic entries so that an
evaluation can finish and still report a number.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


class ConfigurationError(ValueError):
    """Invalid model selection or hyperparameters."""


class UnknownModelError(ConfigurationError):
    """The model selector does not name any known model."""

    def __init__(self, name: str):
        super().__init__(f"Unknown model descriptor: {name}")
        self.name = name


class ModelNotImplementedError(ConfigurationError):
    """The model selector names a model that has no implementation."""

    def __init__(self, name: str):
        super().__init__(f"Model not implemented: {name}")
        self.name = name


class MissingModelFileError(ConfigurationError):
    """A model that loads its tables from disk was given no file."""


class ProbabilityError(ArithmeticError):
    """A smoothing formula produced a non-finite or negative value."""

    def __init__(self, value: float, context: Tuple = ()):
        super().__init__(f"Invalid probability: {value} (context={context})")
        self.value = value
        self.context = context


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal numerical defect detected while scoring."""
    source: str
    message: str
    value: Optional[float] = None
    context: Tuple = ()
