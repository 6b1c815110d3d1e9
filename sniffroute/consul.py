# -*- coding: utf-8 -
#
# This file is part of sniffroute released under the MIT license.
# See the NOTICE for more information.

""" route subdomains to services registered in Consul.

A DNS lookup is done against the Consul DNS interface to resolve the
service ip:port, analogous to::

    dig @127.0.0.1 -p 8600 _foo._tcp.consul SRV

"""

import logging
import socket

import dns.exception
import dns.flags
import dns.message
import dns.query
import dns.rcode
import dns.rdatatype
import gevent

from .route import to
from .suffix import SuffixMatcher
from .util import join_address, parse_address

log = logging.getLogger(__name__)

CONSUL_DNS_PORT = 8600


class ResolveError(Exception):
    """ Base exception for service lookup failures """

    def __init__(self, fqdn, msg=None):
        self.fqdn = fqdn
        Exception.__init__(self, msg or fqdn)


class TransportError(ResolveError):
    """ Exception raised when a DNS exchange fails on either transport """


class LookupTimeout(ResolveError):
    """ Exception raised when the lookup didn't complete in time """

    def __init__(self, fqdn, timeout=None):
        self.timeout = timeout
        ResolveError.__init__(self, fqdn,
                "lookup timed out after %ss: %s" % (timeout, fqdn))


class NoSuchService(ResolveError):
    """ Exception raised when the registry answers NXDOMAIN """

    def __init__(self, fqdn):
        ResolveError.__init__(self, fqdn, "non-existent name: %s" % fqdn)


class LookupFailed(ResolveError):
    """ Exception raised when the response can't be used. The response
    text is kept for diagnostics. """

    reason = "lookup failed for"

    def __init__(self, fqdn, response=None):
        self.response = response
        ResolveError.__init__(self, fqdn,
                "%s: %s\n%s" % (self.reason, fqdn, response))


class NoSrvRecord(LookupFailed):
    reason = "no valid SRV record found for"


class NoARecord(LookupFailed):
    reason = "no valid A record found for"


class DnsClient(object):
    """ exchange DNS messages with a nameserver over UDP or TCP """

    def udp(self, query, where, timeout=None):
        host, port = where
        return dns.query.udp(query, host, timeout=timeout, port=port)

    def tcp(self, query, where, timeout=None):
        host, port = where
        return dns.query.tcp(query, host, timeout=timeout, port=port)


class ServiceResolver(object):
    """ resolve a Consul service name to an ``ip:port`` address.

    ``client`` is the DNS exchange used for queries, any object with
    ``udp(query, where, timeout)`` and ``tcp(query, where, timeout)``
    methods returning a ``dns.message.Message``.
    """

    def __init__(self, consul_dns_addr, client=None):
        self.consul_dns_addr = consul_dns_addr
        self.where = parse_address(consul_dns_addr, CONSUL_DNS_PORT)
        self.client = client or DnsClient()

    def resolve(self, service, timeout=None):
        fqdn = "_%s._tcp.consul." % service
        if timeout is None:
            return self._resolve(fqdn, timeout)

        with gevent.Timeout(timeout, LookupTimeout(fqdn, timeout)):
            return self._resolve(fqdn, timeout)

    def _resolve(self, fqdn, timeout):
        answer, additional = self.srv_query(fqdn, timeout=timeout)

        port = node = None
        for rrset in answer: # "answer" section; SRV records
            if rrset.rdtype == dns.rdatatype.SRV:
                for srv in rrset:
                    port, node = srv.port, srv.target.to_text()
                    break
            if node is not None:
                break
        if node is None:
            raise NoSrvRecord(fqdn, _section_text(answer))

        host = None
        for rrset in additional: # "additional" section; A and TXT records
            if rrset.rdtype == dns.rdatatype.A and \
                    rrset.name.to_text() == node:
                for a in rrset:
                    host = a.address
                    break
            if host is not None:
                break
        if host is None:
            raise NoARecord(fqdn, _section_text(answer))

        return join_address(host, port)

    def srv_query(self, fqdn, timeout=None):
        """ return the answer and additional sections of a SRV query for
        fqdn. A truncated UDP response is queried again over TCP. """
        try:
            query = dns.message.make_query(fqdn, dns.rdatatype.SRV)
        except dns.exception.DNSException as e:
            # the service name comes from an untrusted Host header
            raise LookupFailed(fqdn, str(e))

        r = self._exchange(self.client.udp, query, fqdn, timeout)
        if r.flags & dns.flags.TC:
            log.debug("truncated response for %s, retrying over tcp" % fqdn)
            r = self._exchange(self.client.tcp, query, fqdn, timeout)

        rcode = r.rcode()
        if rcode == dns.rcode.NOERROR:
            return r.answer, r.additional
        elif rcode == dns.rcode.NXDOMAIN:
            raise NoSuchService(fqdn)
        raise LookupFailed(fqdn, r.to_text())

    def _exchange(self, exchange, query, fqdn, timeout):
        try:
            return exchange(query, self.where, timeout=timeout)
        except dns.exception.Timeout:
            raise LookupTimeout(fqdn, timeout)
        except (dns.exception.DNSException, socket.error, ValueError) as e:
            raise TransportError(fqdn, "exchange failed for: %s [%s]" % (
                fqdn, str(e)))


class ConsulMatcher(object):
    """ direct any hostname ending with suffix to the Consul service
    named after the subdomain of that host.

    With the suffix "localhost", "foo.localhost" is directed to the
    service "foo". "foo.bar.localhost" doesn't match.

    Lookup failures are logged and reported as no match.
    """

    def __init__(self, suffix, consul_dns_addr, timeout=None, client=None):
        self.match_suffix = SuffixMatcher(suffix)
        self.resolver = ServiceResolver(consul_dns_addr, client=client)
        self.timeout = timeout

    def __repr__(self):
        return "<ConsulMatcher %r @ %s>" % (self.match_suffix.suffix,
                self.resolver.consul_dns_addr)

    def lookup(self, hostname, timeout=None):
        ok, service = self.match_suffix.has_suffix(hostname)
        if not ok:
            return False, None

        if timeout is None:
            timeout = self.timeout
        try:
            addr = self.resolver.resolve(service, timeout=timeout)
        except ResolveError as e:
            log.error("consul lookup failed: %s" % str(e))
            return False, None
        # resolved addresses aren't cached, every connection is resolved
        # again
        return True, to(addr)


def consul_matcher(suffix, consul_dns_addr, timeout=None):
    return ConsulMatcher(suffix, consul_dns_addr, timeout=timeout).lookup


def _section_text(section):
    return "\n".join(rrset.to_text() for rrset in section)
