"""Buffered reading that reports end of file together with the last bytes."""

from __future__ import annotations

from typing import BinaryIO, Optional

BUFFER_SIZE = 8192


class BstdFile:
    """Wraps a binary file so that ``eof`` becomes true as soon as the
    read that returns the final bytes of the file has completed.

    Plain ``read`` only signals the end of a file on the call after the
    last data; this class reads ahead into an internal buffer so callers
    learn about it one call earlier.
    """

    def __init__(self, fp: BinaryIO) -> None:
        self._fp = fp
        self._buffer = b""
        self._eof = False
        self._error: Optional[OSError] = None

    @property
    def eof(self) -> bool:
        """True once every byte of the file has been handed out."""
        return self._eof

    @property
    def error(self) -> Optional[OSError]:
        """The error met while reading ahead, if any."""
        return self._error

    def _fill(self, size: int) -> Optional[bytes]:
        """Read up to ``size`` bytes; record end of file or an error.

        Returns None when nothing could be read.
        """
        try:
            data = self._fp.read(size)
        except OSError as exc:
            self._error = exc
            return None
        if not data:
            self._eof = True
            return None
        return bytes(data)

    def read(self, size: int) -> bytes:
        """Return up to ``size`` bytes, or ``b""`` once the end is reached.

        Raises ValueError if ``size`` is less than one, and the stored
        OSError if an earlier read-ahead failed.
        """
        if size < 1:
            raise ValueError(f"Invalid read size: {size}")

        if self._eof:
            return b""
        if self._error is not None:
            raise self._error

        if len(self._buffer) > size:
            data = self._buffer[:size]
            self._buffer = self._buffer[size:]
            return data

        fed = self._buffer
        self._buffer = b""

        if len(fed) < size:
            obtained = self._fill(size - len(fed))
            if obtained is None:
                if not fed and self._error is not None:
                    raise self._error
                return fed
            fed += obtained

        ahead = self._fill(BUFFER_SIZE)
        if ahead is not None:
            self._buffer = ahead

        return fed