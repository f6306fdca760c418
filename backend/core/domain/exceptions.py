"""
core.domain.exceptions — Domain-specific exception hierarchy.

These exceptions represent business-rule violations inside service layers.
They are deliberately **not** DRF exceptions so that the service layer stays
framework-agnostic.  ``core.domain.exception_handler`` maps them to HTTP
responses.

Mapping cheatsheet
------------------
┌─────────────────────┬──────┐
│ Domain Exception    │ Code │
├─────────────────────┼──────┤
│ DomainError         │ 400  │
│ PermissionDenied    │ 403  │
│ NotFound            │ 404  │
│ Conflict            │ 409  │
│ InvalidTransition   │ 409  │
└─────────────────────┴──────┘

Usage inside a service::

    from core.domain.exceptions import InvalidTransition

    if report.status not in EDITABLE_STATUSES:
        raise InvalidTransition(
            current=report.status,
            target=ReportStatus.SUBMITTED,
        )
"""

from __future__ import annotations


class DomainError(Exception):
    """
    Base class for all domain / business-rule errors.

    Maps to HTTP 400.
    """

    def __init__(self, message: str = "A business rule was violated.") -> None:
        self.message = message
        super().__init__(self.message)


class PermissionDenied(DomainError):
    """
    The authenticated officer's rank does not allow this operation,
    or they are not an owner of the record.

    Maps to HTTP 403.
    """

    def __init__(self, message: str = "You do not have permission to perform this action.") -> None:
        super().__init__(message)


class NotFound(DomainError):
    """
    The requested record does not exist, or is hidden from the requesting
    officer (e.g. someone else's draft report).

    Maps to HTTP 404.
    """

    def __init__(self, message: str = "The requested resource was not found.") -> None:
        super().__init__(message)


class Conflict(DomainError):
    """
    The operation conflicts with the current state of the resource,
    e.g. a duplicate badge number or drug-type name.

    Maps to HTTP 409.
    """

    def __init__(self, message: str = "The operation conflicts with the current state.") -> None:
        super().__init__(message)


class InvalidTransition(Conflict):
    """
    A lifecycle transition that is not allowed from the current status.

    Maps to HTTP 409.

    Example::

        raise InvalidTransition(
            current="approved",
            target="submitted",
            reason="Approved reports are final.",
        )
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        current: str | None = None,
        target: str | None = None,
        reason: str | None = None,
    ) -> None:
        if message is None:
            parts = ["Invalid status transition"]
            if current and target:
                parts.append(f"from '{current}' to '{target}'")
            if reason:
                parts.append(f"({reason})")
            message = " ".join(parts) + "."
        super().__init__(message)
        self.current = current
        self.target = target
        self.reason = reason
