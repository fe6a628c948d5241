"""Service-layer exception hierarchy."""
from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from btp_dashboard.export.spreadsheet import ExportArtifact


class ServiceError(Exception):
    """Base service error."""


class ConflictError(ServiceError):
    """Raised when a domain conflict occurs."""


class ValidationError(ServiceError):
    """Raised when business validation fails."""


class EmptySelectionError(ValidationError):
    """Raised when an export is requested without any selected facture."""


class AuthError(ServiceError):
    """Raised when sign-in, sign-up or token resolution fails."""


class QueryError(ServiceError):
    """Raised when the invoice store cannot be read."""


class ExportError(ServiceError):
    """Raised when the spreadsheet file cannot be generated."""


class UpdateError(ServiceError):
    """Raised when the bulk "mark imported" update fails.

    The spreadsheet may already have been produced when this is raised; it is
    kept on ``artifact`` together with the ids still waiting for confirmation.
    """

    def __init__(
        self,
        message: str,
        *,
        pending_ids: Sequence[int] = (),
        artifact: "ExportArtifact | None" = None,
    ) -> None:
        super().__init__(message)
        self.pending_ids = list(pending_ids)
        self.artifact = artifact
