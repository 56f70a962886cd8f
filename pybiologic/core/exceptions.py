"""
Error types raised by the modelling and simulation layers.

Every error derives from PyBiologicError so callers can catch the whole
family at once. The subclasses also derive from the builtin exception that
best describes them (ValueError for bad input, RuntimeError for failures
while simulating).
"""

from typing import Optional


class PyBiologicError(Exception):
    """Base class for all pybiologic errors."""


class ModelLoadError(PyBiologicError, ValueError):
    """The model source is missing, malformed or references undefined entities."""


class ConfigurationError(PyBiologicError, ValueError):
    """A scenario, sweep or operating configuration references something invalid."""


class IntegrationError(PyBiologicError, RuntimeError):
    """
    The ODE solver failed to converge.

    Args:
        message (str): The solver's diagnostic message
        status (int, optional): The solver's status code
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(f"Integration failed: {message}")
        self.message = message
        self.status = status


class SignalNotFoundError(PyBiologicError, RuntimeError):
    """The signal species is absent from a simulated trajectory."""
