from assistant_stream.protocol.read_data_stream import StreamPartDecoder, read_data_stream
from assistant_stream.protocol.stream_parts import (
    StreamPart,
    StreamPartType,
    format_stream_part,
    parse_stream_part,
)

__all__ = [
    "StreamPart",
    "StreamPartDecoder",
    "StreamPartType",
    "format_stream_part",
    "parse_stream_part",
    "read_data_stream",
]
