# -*- coding: utf-8 -
#
# This file is part of sniffroute released under the MIT license.
# See the NOTICE for more information.

import copy
import optparse
import textwrap

from . import __version__
from . import util

KNOWN_SETTINGS = []


class ConfigError(Exception):
    """ Exception raised on config error """


def wrap_method(func):
    def _wrapped(instance, *args, **kwargs):
        return func(*args, **kwargs)
    return _wrapped


def make_settings(ignore=None):
    settings = {}
    ignore = ignore or ()
    for s in KNOWN_SETTINGS:
        setting = s()
        if setting.name in ignore:
            continue
        settings[setting.name] = setting.copy()
    return settings


class Config(object):

    def __init__(self, usage=None):
        self.settings = make_settings()
        self.usage = usage

    def __getattr__(self, name):
        if name not in self.settings:
            raise AttributeError("No configuration setting for: %s" % name)
        return self.settings[name].get()

    def __setattr__(self, name, value):
        if name != "settings" and name in self.settings:
            raise AttributeError("Invalid access!")
        super(Config, self).__setattr__(name, value)

    def set(self, name, value):
        if name not in self.settings:
            raise AttributeError("No configuration setting for: %s" % name)
        self.settings[name].set(value)

    def parser(self):
        kwargs = {
            "usage": self.usage,
            "version": __version__
        }
        parser = optparse.OptionParser(**kwargs)

        def sorter(k):
            return (self.settings[k].section, self.settings[k].order)
        for k in sorted(self.settings, key=sorter):
            self.settings[k].add_option(parser)
        return parser


class SettingMeta(type):
    def __new__(cls, name, bases, attrs):
        super_new = super(SettingMeta, cls).__new__
        parents = [b for b in bases if isinstance(b, SettingMeta)]
        if not parents:
            return super_new(cls, name, bases, attrs)

        attrs["order"] = len(KNOWN_SETTINGS)
        attrs["validator"] = wrap_method(attrs["validator"])

        new_class = super_new(cls, name, bases, attrs)
        new_class.fmt_desc(attrs.get("desc", ""))
        KNOWN_SETTINGS.append(new_class)
        return new_class

    def fmt_desc(cls, desc):
        desc = textwrap.dedent(desc).strip()
        setattr(cls, "desc", desc)
        setattr(cls, "short", desc.splitlines()[0])


class Setting(object, metaclass=SettingMeta):
    name = None
    value = None
    section = None
    cli = None
    validator = None
    type = None
    meta = None
    action = None
    default = None
    short = None
    desc = None

    def __init__(self):
        if self.default is not None:
            self.set(self.default)

    def add_option(self, parser):
        if not self.cli:
            return
        args = tuple(self.cli)
        kwargs = {
            "dest": self.name,
            "metavar": self.meta or None,
            "action": self.action or "store",
            "type": self.type or "string",
            "default": None,
            "help": "%s [%s]" % (self.short, self.default)
        }
        if kwargs["action"] != "store":
            kwargs.pop("type")
        parser.add_option(*args, **kwargs)

    def copy(self):
        return copy.copy(self)

    def get(self):
        return self.value

    def set(self, val):
        assert callable(self.validator), "Invalid validator: %s" % self.name
        self.value = self.validator(val)


def validate_pos_int(val):
    if isinstance(val, bool) or not isinstance(val, int):
        val = int(val, 0) if isinstance(val, str) else int(val)
    if val < 0:
        raise ValueError("Value must be positive: %s" % val)
    return val


def validate_pos_float(val):
    if val is None:
        return None
    val = float(val)
    if val < 0:
        raise ValueError("Value must be positive: %s" % val)
    return val


def validate_string(val):
    if val is None:
        return None
    if not isinstance(val, str):
        raise TypeError("Not a string: %s" % val)
    return val.strip()


def validate_address(val):
    val = validate_string(val)
    if not val:
        raise ConfigError("An address is required")
    try:
        util.parse_address(val)
    except RuntimeError as e:
        raise ConfigError(str(e))
    return val


def validate_loglevel(val):
    val = validate_string(val).lower()
    if val not in ("critical", "error", "warning", "info", "debug"):
        raise ConfigError("Invalid log level: %s" % val)
    return val


class Suffix(Setting):
    name = "suffix"
    section = "Routing"
    cli = ["-s", "--suffix"]
    meta = "DOMAIN"
    validator = validate_string
    default = "localhost"
    desc = """\
        The domain suffix routed by this rule.

        Hosts made of a single label followed by this suffix match: with
        'localhost', 'foo.localhost' matches but 'foo.bar.localhost' does
        not.
        """


class Target(Setting):
    name = "target"
    section = "Routing"
    cli = ["-t", "--target"]
    meta = "ADDRESS"
    validator = validate_string
    default = None
    desc = """\
        Send every matching host to this fixed address.

        A string of the form 'HOST:PORT'. When not set, the subdomain is
        resolved as a Consul service.
        """


class Consul(Setting):
    name = "consul"
    section = "Service Discovery"
    cli = ["-c", "--consul"]
    meta = "ADDRESS"
    validator = validate_address
    default = "127.0.0.1:8600"
    desc = """\
        The Consul DNS interface to query.

        A string of the form 'IP:PORT'. The IP must be a literal address.
        """


class DnsTimeout(Setting):
    name = "dns_timeout"
    section = "Service Discovery"
    cli = ["--dns-timeout"]
    meta = "FLOAT"
    validator = validate_pos_float
    type = "float"
    default = 5.0
    desc = """\
        Seconds to wait for a service lookup before giving up.

        The timeout covers both the UDP query and its TCP retry.
        """


class MaxPeek(Setting):
    name = "max_peek"
    section = "Sniffing"
    cli = ["--max-peek"]
    meta = "INT"
    validator = validate_pos_int
    type = "int"
    default = 4096
    desc = """\
        The maximum number of bytes inspected to find the Host header.
        """


class Logfile(Setting):
    name = "logfile"
    section = "Logging"
    cli = ["--log-file"]
    meta = "FILE"
    validator = validate_string
    default = "-"
    desc = """\
        The log file to write to.

        "-" means log to stderr.
        """


class Loglevel(Setting):
    name = "loglevel"
    section = "Logging"
    cli = ["--log-level"]
    meta = "LEVEL"
    validator = validate_loglevel
    default = "info"
    desc = """\
        The granularity of log outputs.

        Valid level names are:

        * debug
        * info
        * warning
        * error
        * critical
        """


class LogConfig(Setting):
    name = "logconfig"
    section = "Logging"
    cli = ["--log-config"]
    meta = "FILE"
    validator = validate_string
    default = None
    desc = """\
        The log config file to use.

        sniffroute uses the standard Python logging module's Configuration
        file format.
        """
