"""
=============================================================================
LINE READER
=============================================================================

Splits a binary stream into lines the way the wire and the documents on
disk actually end them. Python's readline() only knows "\\n", so a file
or request that uses bare "\\r" would come back as one endless line.

    ┌──────────────┬────────────────────────────────────────────────────┐
    │  Terminator  │  Returned line ends with                           │
    ├──────────────┼────────────────────────────────────────────────────┤
    │  "\\n"        │  "\\n"                                              │
    │  "\\r\\n"      │  "\\r\\n"                                            │
    │  "\\r"        │  "\\r"                                              │
    │  end of data │  nothing (last, unterminated line)                 │
    └──────────────┴────────────────────────────────────────────────────┘

Lines always keep their terminator, so writing every line back out in
order reproduces the input exactly.

=============================================================================
THE "\\r" AT THE END OF A CHUNK
=============================================================================

When a chunk ends in "\\r" we can't yet tell "\\r" from "\\r\\n":

    chunk 1 → "GET /a.html HTTP/1.1\\r"
    chunk 2 → "\\nHost: x\\r\\n\\r\\n"

A file is cheap to peek into, so by default the next chunk is read to
decide. A client socket is not: a client that ends lines with "\\r" may
send nothing more until it gets an answer. With lookahead=False the line
is returned right away and a "\\n" that shows up first next time is
dropped as the rest of the same terminator.

=============================================================================
"""

from typing import BinaryIO


CR = b"\r"
LF = b"\n"


def _find_terminator(buffer: bytes, start: int) -> int:
    """Index of the first "\\r" or "\\n" at or after start, or -1."""
    cr = buffer.find(CR, start)
    lf = buffer.find(LF, start)
    if cr < 0:
        return lf
    if lf < 0:
        return cr
    return min(cr, lf)


class LineReader:
    """
    Reads lines ending in "\\n", "\\r\\n" or "\\r" from a binary stream.

    Usage:
        lines = LineReader(open(path, "rb"))
        while True:
            line = lines.readline()
            if not line:
                break

    Args:
        stream: Any binary stream with read1() (BufferedReader, BytesIO,
                socket.makefile("rb")).
        chunk_size: Upper bound on bytes asked for per read.

    OSError from the stream propagates unchanged.
    """

    def __init__(self, stream: BinaryIO, chunk_size: int = 8192):
        self._stream = stream
        self._chunk_size = chunk_size
        self._buffer = b""
        self._eof = False
        self._skip_lf = False

    def _fill(self) -> bool:
        """Append one chunk to the buffer. False once the stream has ended."""
        if self._eof:
            return False

        chunk = self._stream.read1(self._chunk_size)
        if not chunk:
            self._eof = True
            return False

        self._buffer += chunk
        return True

    def readline(self, lookahead: bool = True) -> bytes:
        """
        Return the next line with its terminator, or b"" at end of stream.

        Args:
            lookahead: Read ahead when a chunk ends in "\\r" to see whether
                       a "\\n" follows. Pass False on live connections.
        """
        if self._skip_lf:
            self._skip_lf = False
            if not self._buffer:
                self._fill()
            if self._buffer.startswith(LF):
                self._buffer = self._buffer[1:]

        scanned = 0
        while True:
            end = _find_terminator(self._buffer, scanned)
            if end >= 0:
                break

            scanned = len(self._buffer)
            if not self._fill():
                line, self._buffer = self._buffer, b""
                return line

        if self._buffer[end:end + 1] == CR:
            if end + 1 == len(self._buffer):
                if lookahead:
                    self._fill()
                else:
                    self._skip_lf = True
            if self._buffer[end + 1:end + 2] == LF:
                end += 1

        line = self._buffer[:end + 1]
        self._buffer = self._buffer[end + 1:]
        return line
