#!/usr/bin/env python
# -*- coding: utf-8 -
#
# This file is part of sniffroute released under the MIT license.
# See the NOTICE for more information.

from glob import glob
import os
import re

from setuptools import setup


CLASSIFIERS = [
        'Development Status :: 4 - Beta',
        'Environment :: Other Environment',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: MacOS :: MacOS X',
        'Operating System :: POSIX',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Internet',
        'Topic :: Internet :: Name Service (DNS)',
        'Topic :: Internet :: Proxy Servers',
        'Topic :: Software Development :: Libraries :: Python Modules',
        'Topic :: System :: Networking'
    ]

MODULES = (
        'sniffroute',
    )

SCRIPTS = glob("bin/sniffroute*")

INSTALL_REQUIRES = [
        'gevent',
        'h11',
        'dnspython>=2.0',
    ]

TESTS_REQUIRE = [
        'pytest',
    ]


def get_version():
    with open(os.path.join("sniffroute", "__init__.py")) as f:
        source = f.read()
    version_info = re.search(r"version_info = \(([^)]*)\)", source).group(1)
    return ".".join(v.strip() for v in version_info.split(","))


def main():
    # read long description
    with open(os.path.join(os.path.dirname(__file__), 'README.rst')) as f:
        long_description = f.read()

    PACKAGES = {}
    for name in MODULES:
        PACKAGES[name] = name.replace(".", "/")

    options = dict(
            name = 'sniffroute',
            version = get_version(),
            description = 'Host based routing decisions for TCP proxies',
            long_description = long_description,
            author = 'The sniffroute developers',
            license = 'MIT',
            classifiers = CLASSIFIERS,
            packages = list(PACKAGES.keys()),
            package_dir = PACKAGES,
            scripts = SCRIPTS,
            python_requires = '>=3.7',
            install_requires = INSTALL_REQUIRES,
            extras_require = {'test': TESTS_REQUIRE},
    )

    setup(**options)

if __name__ == "__main__":
    main()
