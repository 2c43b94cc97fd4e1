"""Base classes for the package's value types.

`DomainModel` is the frozen pydantic base for settings and execution options;
`InternalDTO` marks plain dataclasses passed between the marshaller and the
executor.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict

_ModelT = TypeVar("_ModelT", bound="DomainModel")


class DomainModel(BaseModel):
    """Immutable, validated value object."""

    model_config = ConfigDict(frozen=True)

    def with_updates(self: _ModelT, **changes: Any) -> _ModelT:
        """Return a copy with ``changes`` applied and validated.

        Unlike ``model_copy(update=...)`` the result goes through the field
        validators, so invalid overrides raise ``ValidationError``.
        """
        return self.model_validate({**self.model_dump(), **changes})

    def __repr__(self) -> str:
        # Only fields that differ from their defaults, to keep debug logs short
        changed = [
            f"{name}={value!r}"
            for name, value in self
            if value != type(self).model_fields[name].get_default(call_default_factory=True)
        ]
        return f"<{type(self).__name__}{' ' if changed else ''}{' '.join(changed)}>"


class InternalDTO:
    """Marker mixed into dataclasses that never leave the package."""
