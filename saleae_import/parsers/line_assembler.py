"""
Reassembles newline-delimited lines from arbitrarily split byte chunks.

Only the unconsumed tail of the input is retained between calls, so memory
stays proportional to the longest line rather than to the whole export.
"""

from typing import Iterator, Optional


class LineAssembler:
    """
    Growable buffer with a consumed offset and a pull-based line API.

    Example:
        >>> assembler = LineAssembler()
        >>> assembler.push(b"a,b\\nc,")
        >>> list(assembler.lines())
        ['a,b']
        >>> assembler.push(b"d\\n")
        >>> list(assembler.lines())
        ['c,d']
    """

    def __init__(self, encoding: str = "utf-8"):
        if "\n".encode(encoding) != b"\n":
            raise ValueError(
                f"Unsupported line encoding {encoding}: newline is not the single byte 0x0a"
            )
        self.encoding = encoding
        self._buffer = bytearray()
        self._offset = 0
        # Bytes already searched for a newline, relative to the buffer start
        self._scanned = 0

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet returned as a line."""
        return len(self._buffer) - self._offset

    def push(self, chunk: bytes) -> None:
        if self._offset and self._offset * 2 >= len(self._buffer):
            del self._buffer[: self._offset]
            self._scanned -= self._offset
            self._offset = 0
        self._buffer += chunk

    def next_line(self) -> Optional[str]:
        """
        Return the next complete line without its newline, or None.

        A trailing carriage return is kept; callers that care strip it.
        """
        newline = self._buffer.find(b"\n", max(self._scanned, self._offset))
        if newline < 0:
            self._scanned = len(self._buffer)
            return None
        raw = bytes(self._buffer[self._offset : newline])
        self._offset = newline + 1
        self._scanned = self._offset
        return raw.decode(self.encoding, errors="replace")

    def lines(self) -> Iterator[str]:
        """Lazily yield every complete line currently buffered."""
        while True:
            line = self.next_line()
            if line is None:
                return
            yield line

    def finish(self) -> Optional[str]:
        """
        Drain the unterminated remainder at end of input.

        Returns:
            The remainder as one line, or None if nothing is left
        """
        if not self.pending:
            return None
        raw = bytes(self._buffer[self._offset :])
        self._buffer.clear()
        self._offset = 0
        self._scanned = 0
        return raw.decode(self.encoding, errors="replace")
