# -*- coding: utf-8 -
#
# This file is part of sniffroute released under the MIT license.
# See the NOTICE for more information.

import pytest

from sniffroute.route import to
from sniffroute.suffix import SuffixMatcher, suffix_matcher


@pytest.mark.parametrize("hostname, matched, subdomain", [
    ("foo.localhost", True, "foo"),
    ("foo.bar.localhost", False, ""),
    ("localhost", False, ""),
    (".localhost", False, ""),
    ("foolocalhost", False, ""),
    ("foo.localhost.com", False, ""),
    ("", False, ""),
])
def test_has_suffix(hostname, matched, subdomain):
    m = SuffixMatcher(".localhost")
    assert m.has_suffix(hostname) == (matched, subdomain)


@pytest.mark.parametrize("suffix", ["localhost", ".localhost", "..localhost"])
def test_suffix_normalized(suffix):
    m = SuffixMatcher(suffix)
    assert m.suffix == ".localhost"
    assert m.has_suffix("foo.localhost") == (True, "foo")


def test_has_suffix_law():
    hostnames = ["a.b.c", "b.c", "c", "x.c", ".c", "a..c", "ab.c", "abc"]
    for suffix in ["c", ".c", "b.c"]:
        m = SuffixMatcher(suffix)
        normalized = "." + suffix.strip(".")
        for h in hostnames:
            prefix = h[:-len(normalized)]
            expected = h.endswith(normalized) and prefix != "" and \
                    "." not in prefix
            assert m.has_suffix(h)[0] == expected, (suffix, h)


def test_lookup_fixed_target():
    target = to("127.0.0.1:8080")
    lookup = suffix_matcher("localhost", target)
    assert lookup("foo.localhost") == (True, target)
    assert lookup("foo.bar.localhost") == (False, None)
    assert lookup("", timeout=1) == (False, None)
