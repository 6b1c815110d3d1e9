# -*- coding: utf-8 -
#
# This file is part of sniffroute released under the MIT license.
# See the NOTICE for more information.

import io
import errno
import socket

EAGAIN = getattr(errno, 'EAGAIN', 11)
EWOULDBLOCK = getattr(errno, 'EWOULDBLOCK', 11)

_blocking_errnos = (EAGAIN, EWOULDBLOCK)


class PeekableStream(io.RawIOBase):

    """Raw I/O with lookahead on top of a socket or a file object.

    Bytes returned by :meth:`peek` stay in the stream: the next reads
    return them first, so a connection can be inspected before it is
    forwarded verbatim.
    """

    def __init__(self, src, buf=None):
        io.RawIOBase.__init__(self)
        self._src = src
        if hasattr(src, 'recv'):
            self._recv = src.recv
        else:
            self._recv = src.read

        self._buf = bytearray(buf or b"")
        self._eof = False

    @property
    def buffered(self):
        """ number of bytes that can be peeked without blocking """
        return len(self._buf)

    @property
    def eof(self):
        return self._eof

    def fill(self):
        """ receive one chunk from the source into the buffer.

        Return the number of bytes received, 0 at end of stream. """
        if self._eof:
            return 0
        data = self._recv(io.DEFAULT_BUFFER_SIZE)
        if not data:
            self._eof = True
            return 0
        self._buf.extend(data)
        return len(data)

    def peek(self, n):
        """ return up to n bytes without consuming them.

        Fewer than n bytes are returned only when the source reached its
        end. Socket errors are raised to the caller, already buffered
        bytes are kept. """
        self._checkClosed()
        while len(self._buf) < n:
            if not self.fill():
                break
        return bytes(self._buf[:n])

    def readinto(self, b):
        self._checkClosed()
        self._checkReadable()

        if self._buf:
            length = min(len(b), len(self._buf))
            b[0:length] = self._buf[:length]
            del self._buf[:length]
            return length

        if self._eof:
            return 0

        try:
            data = self._recv(len(b))
        except socket.error as e:
            if e.args and e.args[0] in _blocking_errnos:
                return None
            raise

        if not data:
            self._eof = True
            return 0
        length = len(data)
        b[0:length] = data
        return length

    def readable(self):
        """True if the stream is open for reading.
        """
        return not self.closed

    def recv(self, n=None):
        return self.read(n)

    def pending(self):
        """ consume and return everything already buffered """
        data = bytes(self._buf)
        del self._buf[:]
        return data
