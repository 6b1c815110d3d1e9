# -*- coding: utf-8 -
#
# This file is part of sniffroute released under the MIT license.
# See the NOTICE for more information.

import logging

from .http import HttpHostMatch, equals
from .util import parse_address

log = logging.getLogger(__name__)


class DialTarget(object):
    """ upstream address a connection should be proxied to """

    def __init__(self, addr, connect_timeout=None, inactivity_timeout=None):
        self.addr = addr
        self.connect_timeout = connect_timeout
        self.inactivity_timeout = inactivity_timeout

    def __repr__(self):
        return "<DialTarget %s>" % self.addr

    def __eq__(self, other):
        if not isinstance(other, DialTarget):
            return NotImplemented
        return self.addr == other.addr

    def __hash__(self):
        return hash(self.addr)

    @property
    def remote(self):
        return parse_address(self.addr)

    def command(self):
        """ proxy command telling the engine where to connect """
        commands = {"remote": self.remote}
        if self.connect_timeout is not None:
            commands['connect_timeout'] = self.connect_timeout
        if self.inactivity_timeout is not None:
            commands['inactivity_timeout'] = self.inactivity_timeout
        return commands


def to(addr):
    return DialTarget(addr)


class Router(object):
    """ ordered routes per listening address. The first route returning
    a target wins. """

    def __init__(self):
        self.routes = {}

    def add_route(self, ip_port, route):
        self.routes.setdefault(ip_port, []).append(route)

    def add_http_host_route(self, ip_port, http_host, dest):
        """ route to dest when the HTTP/1.x Host header is http_host """
        self.add_http_host_matcher(ip_port, equals(http_host, dest))

    def add_http_host_matcher(self, ip_port, matcher, timeout=None):
        """ route to the target given by matcher for the HTTP/1.x Host
        header """
        self.add_route(ip_port, HttpHostMatch(matcher, timeout=timeout))

    def match(self, ip_port, stream):
        for route in self.routes.get(ip_port, []):
            target = route.match(stream)
            if target is not None:
                log.debug("%s: routed to %r" % (ip_port, target))
                return target
        log.debug("%s: no route matched" % ip_port)
        return None
