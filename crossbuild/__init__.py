"""
crossbuild — cross-compile a Go executable for many targets and package
each binary into a versioned tarball.

Pipeline: enumerate targets → invoke the cross-compiler → package artifacts.
"""

__version__ = "0.1.0"
PACKAGE_NAME = "crossbuild"
SCHEMA_VERSION = "0.1"
