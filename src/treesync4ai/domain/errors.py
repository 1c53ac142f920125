from __future__ import annotations

"""
Reconciliation Error Hierarchy.

Typed failures returned by the reconciliation engine. Every error carries a
stable `kind` identifier and an i18n key so that interface layers can render
a plain, localized message.
"""

from typing import Any


class ReconcileError(Exception):
    """Base class for all typed reconciliation failures."""

    kind: str = "error"
    message_key: str = "errors.generic"

    def __init__(self, detail: str = "", **params: Any):
        super().__init__(detail or self.kind)
        self.detail = detail
        self.params = params


class InvalidInputError(ReconcileError):
    """The instruction could not be parsed or is not actionable."""
    kind = "invalid_input"
    message_key = "errors.invalid_input"


class MissingCredentialsError(ReconcileError):
    """A remote operation is required but no gateway is configured."""
    kind = "missing_credentials"
    message_key = "errors.missing_credentials"


class RemoteUnavailableError(ReconcileError):
    """A remote call returned a non-success status or no data."""
    kind = "remote_unavailable"
    message_key = "errors.remote_unavailable"


class InternalInconsistencyError(ReconcileError):
    """A path expected to exist after creation still does not resolve."""
    kind = "internal_inconsistency"
    message_key = "errors.internal_inconsistency"


class PathConflictError(ReconcileError):
    """An existing node has the wrong kind for the requested path."""
    kind = "path_conflict"
    message_key = "errors.path_conflict"


class ReconcileCancelledError(ReconcileError):
    """The caller cancelled the reconciliation before it completed."""
    kind = "cancelled"
    message_key = "errors.cancelled"
