"""Version range checks using npm-style semantic versioning ranges.

Ranges follow the node-semver grammar evaluated by
:class:`semantic_version.NpmSpec`: comparators (``>=1.6.0 <2``), caret and
tilde ranges (``^1.6.0``, ``~1.6.0``), x-ranges (``1.6``, ``1.x``, ``*``),
hyphen ranges (``1.0.0 - 2.0.0``) and alternatives joined by ``||``.
"""

from __future__ import annotations

import logging

from semantic_version import NpmSpec, Version

logger = logging.getLogger(__name__)


def satisfies(version: str | None, version_range: str) -> bool:
    """Return True when ``version`` falls inside ``version_range``.

    A missing version, an unparseable version or an unparseable range never
    satisfies anything.
    """
    if not version:
        return False
    try:
        spec = NpmSpec(version_range.strip())
        parsed = Version(version)
    except ValueError as exc:
        logger.warning(
            "Cannot compare version %r against range %r: %s",
            version,
            version_range,
            exc,
        )
        return False
    return spec.match(parsed)
