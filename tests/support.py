# -*- coding: utf-8 -
#
# This file is part of sniffroute released under the MIT license.
# See the NOTICE for more information.

import dns.flags
import dns.message
import dns.rrset
import gevent


class ChunkedSocket(object):
    """ socket returning its data in fixed chunks, then raising error or
    reporting the end of the stream """

    def __init__(self, *chunks, **kwargs):
        self.chunks = list(chunks)
        self.error = kwargs.get("error")
        self.calls = 0

    def recv(self, n):
        self.calls += 1
        if self.chunks:
            chunk = self.chunks.pop(0)
            if len(chunk) > n:
                self.chunks.insert(0, chunk[n:])
                chunk = chunk[:n]
            return chunk
        if self.error is not None:
            raise self.error
        return b""


def rr(text):
    """ build a rrset from its zone file representation """
    name, ttl, rdclass, rdtype, rdata = text.split(None, 4)
    return dns.rrset.from_text(name, int(ttl), rdclass, rdtype, rdata)


class Reply(object):

    def __init__(self, answers=(), extras=(), truncate=False, rcode=None,
            error=None, wait=None):
        self.answers = answers
        self.extras = extras
        self.truncate = truncate
        self.rcode = rcode
        self.error = error
        self.wait = wait

    def make(self, query):
        if self.wait is not None:
            gevent.sleep(self.wait)
        if self.error is not None:
            raise self.error

        r = dns.message.make_response(query)
        if self.truncate:
            r.flags |= dns.flags.TC
        if self.rcode is not None:
            r.set_rcode(self.rcode)
        for a in self.answers:
            r.answer.append(rr(a))
        for e in self.extras:
            r.additional.append(rr(e))
        return r


class MockDnsClient(object):
    """ DNS exchange returning canned replies per transport """

    def __init__(self, udp=None, tcp=None):
        self.replies = {"udp": udp, "tcp": tcp}
        self.calls = []
        self.queries = []
        self.timeouts = []
        self.where = []

    def exchange(self, net, query, where, timeout):
        self.calls.append(net)
        self.queries.append(query)
        self.timeouts.append(timeout)
        self.where.append(where)
        reply = self.replies[net]
        if reply is None:
            raise AssertionError("unexpected %s exchange" % net)
        return reply.make(query)

    def udp(self, query, where, timeout=None):
        return self.exchange("udp", query, where, timeout)

    def tcp(self, query, where, timeout=None):
        return self.exchange("tcp", query, where, timeout)


SRV_ANSWER = [
    "_foo._tcp.consul. 0 IN SRV 1 1 51885 MacBook-Pro.local.node.dc1.consul.",
]

SRV_EXTRA = [
    "MacBook-Pro.local.node.dc1.consul. 0 IN A 127.0.0.1",
    'MacBook-Pro.local.node.dc1.consul. 0 IN TXT "consul-network-segment="',
]
