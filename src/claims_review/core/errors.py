"""Typed failures raised by the workflow engine and entity store."""

from __future__ import annotations


class ClaimsReviewError(Exception):
    """Base class for every expected, caller-facing failure."""


class ClaimNotFoundError(ClaimsReviewError):
    """The referenced claim does not exist."""

    def __init__(self, claim_id: str) -> None:
        super().__init__(f"Claim {claim_id} not found")
        self.claim_id = claim_id


class ClaimValidationError(ClaimsReviewError):
    """Caller-supplied input violates a precondition; nothing was mutated."""


class StateConflictError(ClaimsReviewError):
    """The claim's current status does not permit the requested transition."""

    def __init__(self, claim_id: str, status: str, operation: str) -> None:
        super().__init__(f"Cannot {operation} claim {claim_id} in status '{status}'")
        self.claim_id = claim_id
        self.status = status
        self.operation = operation


class DuplicateClaimNumberError(ClaimsReviewError):
    """A claim with this claim number already exists."""

    def __init__(self, claim_number: str) -> None:
        super().__init__(f"Claim number {claim_number} already exists")
        self.claim_number = claim_number
