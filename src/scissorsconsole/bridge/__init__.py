"""Host bridge: wire codec, outbound channels, and inbound line serialization."""

from .channel import CallbackChannel, HostChannel, HostChannelError, StreamChannel
from .event_reader import LineQueue, ReaderHandle, reader_loop, start_reader
from .loopback import LoopbackHost
from .protocol import (
    BridgeProtocol,
    DecodeError,
    decode_event,
    encode_command,
    encode_event,
    parse_command,
)

__all__ = [
    "BridgeProtocol",
    "CallbackChannel",
    "DecodeError",
    "HostChannel",
    "HostChannelError",
    "LineQueue",
    "LoopbackHost",
    "ReaderHandle",
    "StreamChannel",
    "decode_event",
    "encode_command",
    "encode_event",
    "parse_command",
    "reader_loop",
    "start_reader",
]
