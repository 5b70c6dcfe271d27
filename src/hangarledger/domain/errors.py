"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as an id that is already taken."""


class ArchiveError(DomainError):
    """Archive is unreadable or lacks a required entry."""


class BackupVersionError(DomainError):
    """Backup was written by a newer, unsupported format version."""


def entity_not_found(kind: str, entity_id: str) -> str:
    """Return message for a missing entity."""
    return f"{kind} {entity_id} not found"


def missing_archive_entry(name: str) -> str:
    """Return message for an archive missing a required entry."""
    return f"Invalid archive: missing {name}"


def unsupported_backup_version(version: int, supported: int) -> str:
    """Return message when a backup is newer than this build understands."""
    return f"Backup version {version} is newer than supported version {supported}"


def blocking_parse_errors(count: int) -> str:
    """Return message when parse errors prevent continuing an import."""
    return (
        f"Cannot continue import: {count} blocking error{'s' if count != 1 else ''} "
        "must be fixed in the source file first."
    )
