# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Error taxonomy shared by the access-control services.

Services raise these; the API layer translates them to HTTP responses in
``src.api.errors``. ``retryable`` tells the caller whether repeating the
operation with freshly loaded state can succeed.
"""


class AccessControlError(Exception):
    """Base class for all service-level failures."""

    retryable = False
    default_message = "Operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class PermissionDenied(AccessControlError):
    """The principal lacks the rights for the requested action."""

    default_message = "Insufficient permission"


class NotFoundError(AccessControlError):
    """The requested resource does not exist."""

    default_message = "Resource not found"


class ConflictError(AccessControlError):
    """The record changed between read and write; re-read and retry."""

    retryable = True
    default_message = "Record changed, please retry"


class InvalidTransitionError(AccessControlError):
    """The requested status transition is not allowed from the current state."""

    default_message = "Record already finalized"


class InvalidRequestError(AccessControlError):
    """The request violates the operation's contract (missing reason, bad token)."""

    default_message = "Invalid request"


class StorageFailure(AccessControlError):
    """Transient backend error."""

    retryable = True
    default_message = "Storage temporarily unavailable"
