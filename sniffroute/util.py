# -*- coding: utf-8 -
#
# This file is part of sniffroute released under the MIT license.
# See the NOTICE for more information.

import socket


def is_ipv6(addr):
    try:
        socket.inet_pton(socket.AF_INET6, addr)
    except (socket.error, ValueError): # not a valid address
        return False
    return True


def parse_address(netloc, default_port=5000):
    if isinstance(netloc, tuple):
        return netloc

    # get host
    if '[' in netloc and ']' in netloc:
        host = netloc.split(']')[0][1:].lower()
    elif ':' in netloc:
        host = netloc.split(':')[0].lower()
    elif netloc == "":
        host = "0.0.0.0"
    else:
        host = netloc.lower()

    #get port
    netloc = netloc.split(']')[-1]
    if ":" in netloc:
        port = netloc.split(':', 1)[1]
        if not port.isdigit():
            raise RuntimeError("%r is not a valid port number." % port)
        port = int(port)
    else:
        port = default_port
    return (host, port)


def join_address(host, port):
    """ format a host and a port as a dialable ``host:port`` string """
    if is_ipv6(host):
        return "[%s]:%s" % (host, port)
    return "%s:%s" % (host, port)
