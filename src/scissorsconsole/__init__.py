"""Scissors Console: live telemetry window and host bridge for the sensor rig."""

from .core.controller import ConsoleController, EmptyFilenameError, NullPresentation, Presentation

__version__ = "0.3.0"

__all__ = [
    "ConsoleController",
    "EmptyFilenameError",
    "NullPresentation",
    "Presentation",
    "__version__",
]
