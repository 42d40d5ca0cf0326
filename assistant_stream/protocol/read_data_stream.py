from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Iterator
import logging

from assistant_stream.errors import MalformedPart
from assistant_stream.protocol.stream_parts import STREAM_PART_TERMINATOR, StreamPart, parse_stream_part

logger = logging.getLogger(__name__)

_TERMINATOR_BYTES = STREAM_PART_TERMINATOR.encode("utf-8")


class StreamPartDecoder:
    """Incremental decoder turning arbitrary byte fragments into stream parts.

    Fragments do not need to line up with stream lines: bytes of an incomplete
    line stay buffered until its terminator arrives, and each complete line is
    UTF-8 decoded on its own.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    def feed(self, fragment: bytes | str) -> Iterator[StreamPart]:
        """Buffer ``fragment`` and return an iterator over the lines it completed."""

        if isinstance(fragment, str):
            fragment = fragment.encode("utf-8")
        self._buffer += fragment
        return self._drain()

    def _drain(self) -> Iterator[StreamPart]:
        while True:
            index = self._buffer.find(_TERMINATOR_BYTES)
            if index < 0:
                return
            raw_line = bytes(self._buffer[:index])
            del self._buffer[: index + 1]
            try:
                line = raw_line.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise MalformedPart(raw_line.decode("utf-8", errors="replace"), "invalid UTF-8") from exc
            yield parse_stream_part(line)

    def close(self) -> None:
        """Finish decoding; an unterminated trailing line is dropped."""

        if self._buffer:
            logger.debug("discarding unterminated trailing stream data", extra={"leftover_bytes": len(self._buffer)})
        self._buffer.clear()


async def read_data_stream(fragments: AsyncIterable[bytes | str]) -> AsyncIterator[StreamPart]:
    """Lazily decode stream parts from a fragment source in arrival order.

    A malformed line raises ``MalformedPart`` at its position and ends the read.
    """

    decoder = StreamPartDecoder()
    async for fragment in fragments:
        for part in decoder.feed(fragment):
            yield part
    decoder.close()
