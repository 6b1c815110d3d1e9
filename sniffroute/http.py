# -*- coding: utf-8 -
#
# This file is part of sniffroute released under the MIT license.
# See the NOTICE for more information.

""" HTTP/1.x Host header sniffing.

The Host header is read from a :class:`~sniffroute.stream.PeekableStream`
without consuming any of its bytes, so the request can still be forwarded
untouched once a route is chosen.
"""

import logging
import socket
from urllib.parse import urlsplit

import h11

log = logging.getLogger(__name__)

MAX_PEEK = 4 << 10

LF_HOST_COLON = b"\nHost:"
LF_LOWER_HOST_COLON = b"\nhost:"
LF = b"\n"
CRLFCRLF = b"\r\n\r\n"
LFLF = b"\n\n"


class HttpHostMatch(object):
    """ route a connection according to the matcher answer for its
    HTTP Host header """

    def __init__(self, matcher, timeout=None, max_peek=MAX_PEEK):
        self.matcher = matcher
        self.timeout = timeout
        self.max_peek = max_peek

    def match(self, stream):
        hostname = http_host_header(stream, self.max_peek)
        ok, target = self.matcher(hostname, timeout=self.timeout)
        if ok:
            return target
        return None


def equals(host, target):
    """ matcher accepting only the hostname ``host`` """
    def _lookup(hostname, timeout=None):
        if hostname == host:
            return True, target
        return False, None
    return _lookup


def http_host_header(stream, max_peek=MAX_PEEK):
    """ return the HTTP Host header from stream without consuming any of
    its bytes. Return "" if none can be found. """
    peek_size = 0
    while True:
        peek_size += 1
        if peek_size > max_peek:
            return http_host_header_from_bytes(
                    stream.peek(min(stream.buffered, max_peek)))

        try:
            b = stream.peek(peek_size)
        except socket.error as e:
            log.debug("peek interrupted: %s" % str(e))
            return http_host_header_from_bytes(
                    stream.peek(min(stream.buffered, max_peek)))

        n = min(stream.buffered, max_peek)
        if n > peek_size:
            b = stream.peek(n)
            peek_size = n

        if b:
            if b[0] < ord('A') or b[0] > ord('Z'):
                # Doesn't look like an HTTP verb (GET, POST, etc).
                return ""
            if CRLFCRLF in b or LFLF in b:
                return _request_host(b)

        if len(b) < peek_size:
            # end of stream before the end of the headers
            return http_host_header_from_bytes(b)


def _request_host(data):
    conn = h11.Connection(h11.SERVER)
    conn.receive_data(data)
    try:
        event = conn.next_event()
    except h11.ProtocolError as e:
        # h11 also refuses HTTP/1.1 requests with zero or several Host
        # headers
        log.debug("invalid request: %s" % str(e))
        return ""

    if not isinstance(event, h11.Request):
        return ""

    hosts = [value for name, value in event.headers if name == b"host"]
    if len(hosts) > 1:
        return ""

    if event.method == b"CONNECT":
        # authority-form target
        return event.target.decode("latin-1")

    # absolute-form target wins over the header
    parts = urlsplit(event.target)
    if parts.scheme and parts.netloc:
        return parts.netloc.decode("latin-1")
    if hosts:
        return hosts[0].decode("latin-1")
    return ""


def http_host_header_from_bytes(b):
    i = b.find(LF_HOST_COLON)
    if i != -1:
        return until_eol(b[i + len(LF_HOST_COLON):]).strip().decode("latin-1")
    i = b.find(LF_LOWER_HOST_COLON)
    if i != -1:
        return until_eol(b[i + len(LF_LOWER_HOST_COLON):]).strip().decode("latin-1")
    return ""


def until_eol(v):
    """ return v truncated before the first LF, if any. The result may
    still end with a CR. """
    i = v.find(LF)
    if i != -1:
        return v[:i]
    return v
