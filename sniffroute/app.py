# -*- coding: utf-8 -
#
# This file is part of sniffroute released under the MIT license.
# See the NOTICE for more information.

import logging
from logging.config import fileConfig
import os
import sys

from .config import Config
from .consul import ConsulMatcher
from .http import http_host_header
from .route import to
from .stream import PeekableStream
from .suffix import suffix_matcher


class Application(object):
    """ print the routing decision of a suffix rule for the hostnames
    given on the command line. "-" reads a raw HTTP request from stdin
    and routes it by its Host header. """

    LOG_LEVELS = {
        "critical": logging.CRITICAL,
        "error": logging.ERROR,
        "warning": logging.WARNING,
        "info": logging.INFO,
        "debug": logging.DEBUG
    }

    def __init__(self, stdin=None, stdout=None):
        self.logger = None
        self.cfg = Config("%prog [OPTIONS] HOSTNAME|- [HOSTNAME ...]")
        self.hostnames = []
        self.stdin = stdin
        self.stdout = stdout or sys.stdout

    def load_config(self, args=None):
        # parse console args
        parser = self.cfg.parser()
        opts, args = parser.parse_args(args)

        if not args:
            parser.error("No hostname specified.")
        self.hostnames = args

        # Load conf
        try:
            for k, v in opts.__dict__.items():
                if v is None:
                    continue
                self.cfg.set(k.lower(), v)
        except Exception as e:
            sys.stderr.write("config error: %s\n" % str(e))
            sys.exit(1)

    def configure_logging(self):
        """\
        Set the log level and choose the destination for log output.
        """
        self.logger = logging.getLogger('sniffroute')

        fmt = r"%(asctime)s [%(process)d] [%(levelname)s] %(message)s"
        datefmt = r"%Y-%m-%d %H:%M:%S"
        if not self.cfg.logconfig:
            handlers = []
            if self.cfg.logfile != "-":
                handlers.append(logging.FileHandler(self.cfg.logfile))
            else:
                handlers.append(logging.StreamHandler())

            loglevel = self.LOG_LEVELS.get(self.cfg.loglevel.lower(), logging.INFO)
            self.logger.setLevel(loglevel)
            for h in handlers:
                h.setFormatter(logging.Formatter(fmt, datefmt))
                self.logger.addHandler(h)
        else:
            if os.path.exists(self.cfg.logconfig):
                fileConfig(self.cfg.logconfig)
            else:
                raise RuntimeError("Error: logfile '%s' not found." %
                        self.cfg.logconfig)

    def matcher(self):
        if self.cfg.target:
            return suffix_matcher(self.cfg.suffix, to(self.cfg.target))
        return ConsulMatcher(self.cfg.suffix, self.cfg.consul,
                timeout=self.cfg.dns_timeout).lookup

    def route(self, matcher, hostname):
        if hostname == "-":
            stream = PeekableStream(self.stdin or sys.stdin.buffer)
            hostname = http_host_header(stream, self.cfg.max_peek)
            self.logger.debug("Host header from stdin: %r" % hostname)

        ok, target = matcher(hostname)
        if ok:
            self.stdout.write("%s -> %s\n" % (hostname, target.addr))
        else:
            self.stdout.write("%s -> no match\n" % hostname)
        return ok

    def run(self, args=None):
        self.load_config(args)
        self.configure_logging()

        matcher = self.matcher()
        matched = [self.route(matcher, hostname)
                for hostname in self.hostnames]
        if all(matched):
            return 0
        return 1


def run():
    # the lookups are done with gevent sockets
    from gevent import monkey
    monkey.patch_all()

    try:
        sys.exit(Application().run())
    except RuntimeError as e:
        sys.stderr.write("\nError: %s\n\n" % e)
        sys.stderr.flush()
        sys.exit(1)
