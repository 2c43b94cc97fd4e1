"""Parsing of the columnar ``hab svc status`` table."""

from __future__ import annotations

import re

_COLUMN_SEPARATOR = re.compile(r"\s{2,}")


def parse_status_output(output: str | None) -> list[dict[str, str | None]]:
    """Zip the header row with every following row.

    Columns are separated by runs of two or more whitespace characters. A row
    shorter than the header leaves the trailing columns as None and surplus
    values are dropped. Output holding only the header yields an empty list.
    """
    lines = (output or "").split("\n")
    if len(lines) == 1:
        return []

    columns = _COLUMN_SEPARATOR.split(lines[0])
    services: list[dict[str, str | None]] = []
    for line in lines[1:]:
        values = _COLUMN_SEPARATOR.split(line)
        services.append(
            {
                column: values[index] if index < len(values) else None
                for index, column in enumerate(columns)
            }
        )
    return services
