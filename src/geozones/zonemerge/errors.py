"""
Exceptions raised by the zonemerge package.

Only caller misuse is fatal. Problems with the zone data itself (bad rings,
topology failures) are reported as MergeWarning records instead.
"""


class ZoneMergeError(Exception):
    """Base class for zonemerge errors."""


class InvalidOptionsError(ZoneMergeError, ValueError):
    """Merge options or arguments that cannot be used."""


class UnionFindIndexError(ZoneMergeError, IndexError):
    """An element index outside of a UnionFind's range."""
