# -*- coding: utf-8 -
#
# This file is part of sniffroute released under the MIT license.
# See the NOTICE for more information.

import io

import pytest

from sniffroute.route import DialTarget, Router, to
from sniffroute.stream import PeekableStream
from sniffroute.suffix import suffix_matcher
from sniffroute.util import join_address, parse_address

REQUEST = b"GET / HTTP/1.1\r\nHost: foo.localhost\r\n\r\n"


def make_stream(data=REQUEST):
    return PeekableStream(io.BytesIO(data))


def test_dial_target():
    t = to("127.0.0.1:51885")
    assert t.addr == "127.0.0.1:51885"
    assert t.remote == ("127.0.0.1", 51885)
    assert t == DialTarget("127.0.0.1:51885")
    assert t.command() == {"remote": ("127.0.0.1", 51885)}


def test_dial_target_timeouts():
    t = DialTarget("[::1]:8080", connect_timeout=2, inactivity_timeout=30)
    assert t.command() == {
        "remote": ("::1", 8080),
        "connect_timeout": 2,
        "inactivity_timeout": 30,
    }


@pytest.mark.parametrize("netloc, address", [
    ("127.0.0.1:8600", ("127.0.0.1", 8600)),
    ("[::1]:53", ("::1", 53)),
    ("Example.COM", ("example.com", 5000)),
    ("", ("0.0.0.0", 5000)),
])
def test_parse_address(netloc, address):
    assert parse_address(netloc) == address


def test_parse_address_invalid_port():
    with pytest.raises(RuntimeError):
        parse_address("127.0.0.1:http")


def test_join_address():
    assert join_address("127.0.0.1", 80) == "127.0.0.1:80"
    assert join_address("::1", 80) == "[::1]:80"


def test_router_exact_host():
    router = Router()
    target = to("127.0.0.1:8080")
    router.add_http_host_route(":80", "foo.localhost", target)
    assert router.match(":80", make_stream()) is target
    assert router.match(":443", make_stream()) is None


def test_router_first_match_wins():
    router = Router()
    first = to("127.0.0.1:1")
    second = to("127.0.0.1:2")
    router.add_http_host_route(":80", "bar.localhost", to("127.0.0.1:3"))
    router.add_http_host_matcher(":80", suffix_matcher("localhost", first))
    router.add_http_host_matcher(":80", suffix_matcher("localhost", second))

    stream = make_stream()
    assert router.match(":80", stream) is first
    assert stream.read() == REQUEST


def test_router_no_match():
    router = Router()
    router.add_http_host_matcher(":80", suffix_matcher("example.com",
        to("127.0.0.1:1")))
    assert router.match(":80", make_stream()) is None
    assert router.match(":80", make_stream(b"\x16\x03\x01")) is None
