"""Core console state: samples, the live window, and the display clock.

The controller that ties these to the host bridge lives in
:mod:`scissorsconsole.core.controller`; it is not re-exported here so the
bridge can import the data model without a cycle.
"""

from .models import (
    ChooseDirectory,
    ClearLog,
    Command,
    Event,
    FolderChosen,
    LogLine,
    Sample,
    SessionState,
    Start,
    Stop,
    Telemetry,
)
from .sample_buffer import MAX_PTS, ChannelCountMismatch, SampleBuffer
from .timebase import TimeBase, ns_to_seconds

__all__ = [
    "ChooseDirectory",
    "ClearLog",
    "Command",
    "Event",
    "FolderChosen",
    "LogLine",
    "Sample",
    "SessionState",
    "Start",
    "Stop",
    "Telemetry",
    "MAX_PTS",
    "ChannelCountMismatch",
    "SampleBuffer",
    "TimeBase",
    "ns_to_seconds",
]
