"""Parsing of ``hab --version`` output."""

from __future__ import annotations

import re
from dataclasses import dataclass

from habitat_client.core.interfaces.model_bases import InternalDTO

VERSION_PATTERN = re.compile(r"^hab ([^/]+)/(\d+)$")


@dataclass(frozen=True)
class BinaryVersion(InternalDTO):
    version: str
    build: str


def parse_version_output(output: str | None) -> BinaryVersion | None:
    """Extract version and build from a line like ``hab 1.6.1234/20230101000000``.

    Returns None when the output does not match.
    """
    if not output:
        return None
    match = VERSION_PATTERN.match(output.strip())
    if match is None:
        return None
    return BinaryVersion(version=match.group(1), build=match.group(2))
