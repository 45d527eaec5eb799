"""Byte input source and output sink for the machine.

EOF is represented as the zero byte: once the source is exhausted every
further read returns 0.
"""

from typing import BinaryIO, Optional, TextIO, Union


InputLike = Union[None, bytes, bytearray, str, BinaryIO, TextIO]


class ByteInput:
    """Ordered byte source with EOF-as-zero semantics.

    Accepts None (already exhausted), bytes/bytearray, str (UTF-8 encoded)
    or any stream exposing `read(n)`. Text streams are UTF-8 encoded
    one character at a time.
    """

    def __init__(self, source: InputLike = None):
        self._stream: Optional[Union[BinaryIO, TextIO]] = None
        self._buffer = b""
        self._offset = 0
        self.exhausted = False
        self.bytes_read = 0

        if source is None:
            self.exhausted = True
        elif isinstance(source, str):
            self._buffer = source.encode("utf-8")
        elif isinstance(source, (bytes, bytearray)):
            self._buffer = bytes(source)
        elif hasattr(source, "read"):
            self._stream = source
        else:
            raise TypeError(f"Unsupported input source: {type(source).__name__}")

    def read_byte(self) -> int:
        """Consume one byte. Returns 0 at (and after) end of input."""
        if self.exhausted:
            return 0

        if self._offset >= len(self._buffer):
            chunk = self._stream.read(1) if self._stream is not None else b""
            if isinstance(chunk, str):
                # Text streams (sys.stdin, StringIO) yield characters
                chunk = chunk.encode("utf-8")
            if not chunk:
                self.exhausted = True
                return 0
            self._buffer = bytes(chunk)
            self._offset = 0

        value = self._buffer[self._offset]
        self._offset += 1

        self.bytes_read += 1
        return value


class ByteOutput:
    """Ordered byte sink.

    Every byte is kept in memory (see `getvalue`) and, if a binary sink
    was given, written through to it immediately. Flushing the sink is
    the owner's concern.
    """

    def __init__(self, sink: Optional[BinaryIO] = None):
        self._sink = sink
        self._data = bytearray()

    def write_byte(self, value: int) -> None:
        byte = value & 0xFF
        self._data.append(byte)
        if self._sink is not None:
            self._sink.write(bytes((byte,)))

    def getvalue(self) -> bytes:
        return bytes(self._data)

    def text(self) -> str:
        """Output decoded as UTF-8 for display; bad bytes are replaced."""
        return self._data.decode("utf-8", errors="replace")

    def __len__(self) -> int:
        return len(self._data)
