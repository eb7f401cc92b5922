"""Errors raised while loading, normalizing, validating, and saving targets."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path


def _entry_location(index: int, label: str | None) -> str:
    if label:
        return f"targets[{index}] ({label})"
    return f"targets[{index}]"


class TargetsError(Exception):
    """Base class for catalogue errors."""


class TargetValidationError(TargetsError, ValueError):
    """Raised when a target or document violates a catalogue invariant.

    Attributes
    ----------
    field
        Name of the implicated field.
    index
        Position of the offending entry in document order.
    label
        ``owner/repository`` or owner of the offending entry, when known.

    """

    def __init__(
        self, message: str, *, field: str, index: int, label: str | None
    ) -> None:
        """Store context and prefix the message with the entry location."""
        self.field = field
        self.index = index
        self.label = label
        super().__init__(f"{_entry_location(index, label)}: {message}")


class MissingFieldError(TargetValidationError):
    """Raised when a required field is absent or blank."""

    def __init__(self, field: str, *, index: int = 0, label: str | None = None) -> None:
        """Initialise with the missing field name."""
        super().__init__(
            f"{field} is required and must not be empty",
            field=field,
            index=index,
            label=label,
        )


class InvalidFieldError(TargetValidationError):
    """Raised when a field holds a value outside its permitted form."""

    def __init__(
        self,
        field: str,
        value: object,
        reason: str,
        *,
        index: int = 0,
        label: str | None = None,
    ) -> None:
        """Initialise with the offending value and the rule it breaks."""
        self.value = value
        super().__init__(
            f"{field} {value!r} {reason}", field=field, index=index, label=label
        )


class InvalidKindCombinationError(TargetValidationError):
    """Raised when ``repository`` presence disagrees with the target kind."""

    def __init__(
        self,
        kind: str,
        *,
        repository_present: bool,
        index: int = 0,
        label: str | None = None,
    ) -> None:
        """Initialise with the kind and whether a repository was supplied."""
        self.kind = kind
        self.repository_present = repository_present
        if repository_present:
            message = f"repository must not be set for {kind} targets"
        else:
            message = f"repository is required for {kind} targets"
        super().__init__(message, field="repository", index=index, label=label)


class DuplicateFieldError(TargetValidationError):
    """Raised when two entries share a value that must be unique.

    The earlier entry is never at fault: ``first_index`` points at the first
    occurrence and ``index``/``conflicting_index`` at the entry that collided.
    """

    def __init__(  # noqa: PLR0913
        self,
        field: str,
        value: str,
        *,
        first_index: int,
        conflicting_index: int,
        first_label: str | None = None,
        conflicting_label: str | None = None,
    ) -> None:
        """Initialise with the duplicated value and both entry positions."""
        self.value = value
        self.first_index = first_index
        self.conflicting_index = conflicting_index
        self.first_label = first_label
        if first_index == conflicting_index:
            message = f"{field} {value!r} collides with another path of the same entry"
        else:
            message = (
                f"duplicate {field} {value!r}, first used by "
                f"{_entry_location(first_index, first_label)}"
            )
        super().__init__(
            message, field=field, index=conflicting_index, label=conflicting_label
        )


class CatalogueFormatError(TargetsError):
    """Raised when a catalogue document cannot be parsed or decoded."""

    @classmethod
    def invalid_yaml(cls, detail: object) -> CatalogueFormatError:
        """Return an error for YAML syntax problems."""
        return cls(f"failed to parse YAML: {detail}")

    @classmethod
    def schema_mismatch(cls, detail: object) -> CatalogueFormatError:
        """Return an error for documents that do not match the schema."""
        return cls(f"schema validation failed: {detail}")

    @classmethod
    def empty(cls) -> CatalogueFormatError:
        """Return an error for an empty catalogue file."""
        return cls("catalogue file is empty")


class PersistenceError(TargetsError):
    """Raised when the catalogue cannot be read from or written to disk."""

    def __init__(self, path: Path, action: str, detail: object) -> None:
        """Initialise with the path, the attempted action, and the cause."""
        self.path = path
        self.action = action
        super().__init__(f"failed to {action} catalogue at {path}: {detail}")
