"""Rit - a minimal local version-control core.

Rit stores file snapshots in a content-addressable object store, stages them
in an index and records them as a linear chain of commits that can be
inspected and diffed line by line.
"""

from rit.constants import VERSION

__version__ = VERSION
__author__ = "Rit Contributors"

__all__ = ["__version__", "__author__"]
