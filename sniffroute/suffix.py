# -*- coding: utf-8 -
#
# This file is part of sniffroute released under the MIT license.
# See the NOTICE for more information.


def suffix_matcher(suffix, target):
    """ matcher directing every host with the given domain suffix to a
    single target """
    return SuffixMatcher(suffix, target).lookup


class SuffixMatcher(object):
    """ match hostnames made of exactly one label followed by a domain
    suffix.

    "localhost" and ".localhost" are the same suffix. With it,
    "foo.localhost" matches with the subdomain "foo" while
    "foo.bar.localhost" and "localhost" don't match.
    """

    def __init__(self, suffix, target=None):
        self.suffix = "." + suffix.lstrip(".")
        self.target = target

    def __repr__(self):
        return "<SuffixMatcher %r>" % self.suffix

    def lookup(self, hostname, timeout=None):
        ok, _ = self.has_suffix(hostname)
        if ok:
            return True, self.target
        return False, None

    def has_suffix(self, hostname):
        if hostname.endswith(self.suffix):
            prefix = hostname[:len(hostname) - len(self.suffix)]
            if not prefix or "." in prefix:
                return False, ""
            return True, prefix
        return False, ""
