"""Error taxonomy for the SEO pipeline.

Every error carries a ``kind`` so callers can tell a bad request apart from
an unreliable collaborator:

- ``configuration``: a required integration or credential is missing.
- ``validation``: the request references missing or mismatched records.
- ``contract``: the LLM answered, but not in the agreed JSON shape.
- ``conflict``: the request collides with existing state.
- ``integration``: an external service (LLM, CMS) failed.

Contract and integration errors are worth retrying; the others are not.
"""

from __future__ import annotations


class SeoAgentError(Exception):
    """Base error for the SEO pipeline."""

    kind = "internal"

    @property
    def retryable(self) -> bool:
        return self.kind in {"contract", "integration"}


# ── Configuration ────────────────────────────────────────────────


class ConfigurationError(SeoAgentError):
    """A required setting is missing or invalid."""

    kind = "configuration"


class IntegrationNotConfiguredError(ConfigurationError):
    """No CMS connection is available for the operation."""


class MissingAPIKeyError(ConfigurationError):
    """The LLM provider API key is not set."""


# ── Validation ───────────────────────────────────────────────────


class InvalidRequestError(SeoAgentError):
    """The request itself is malformed."""

    kind = "validation"


class InvalidIdentifierError(InvalidRequestError):
    """An identifier is blank or malformed."""


class NotFoundError(InvalidRequestError):
    """A referenced record does not exist."""


class OwnershipError(InvalidRequestError):
    """The requesting user does not own the project."""


class CrossReferenceError(InvalidRequestError):
    """Two records reference each other inconsistently."""


class DraftIncompleteError(InvalidRequestError):
    """A draft is missing its title or body."""


class MissingHeroImageError(InvalidRequestError):
    """A draft has no hero image attached."""


class EmptyDraftError(InvalidRequestError):
    """A draft body is empty, so there is nothing to refine."""


# ── Contract ─────────────────────────────────────────────────────


class ContractError(SeoAgentError):
    """The LLM response violates the expected JSON contract."""

    kind = "contract"


class EmptyResponseError(ContractError):
    """The LLM returned no text."""


class InvalidJSONError(ContractError):
    """The LLM response is not parseable JSON."""


class ResponseShapeError(ContractError):
    """The LLM JSON has the wrong shape or item count."""


class IncompletePayloadError(ContractError):
    """The draft JSON lacks a title, summary or outline."""


class MissingBodyError(ContractError):
    """The refine JSON lacks a body."""


class StructureMismatchError(ContractError):
    """The refined body no longer has the original section headings."""


# ── Conflict ─────────────────────────────────────────────────────


class ConflictError(SeoAgentError):
    """The request conflicts with current state."""

    kind = "conflict"


class DuplicateJobError(ConflictError):
    """The draft already has a queued or publishing job."""

    def __init__(self, message: str, job_id: str | None = None) -> None:
        super().__init__(message)
        self.job_id = job_id


class JobInFlightError(ConflictError):
    """The job is publishing and cannot be retried."""


class InvalidTransitionError(ConflictError):
    """A status change is not allowed by the lifecycle."""


# ── Integration ──────────────────────────────────────────────────


class IntegrationError(SeoAgentError):
    """An external service call failed."""

    kind = "integration"


class LLMError(IntegrationError):
    """The LLM provider call failed."""


class CmsError(IntegrationError):
    """The CMS answered with a non-success status."""

    def __init__(self, status: int, reason: str, body: str) -> None:
        super().__init__(f"WordPress API error ({status} {reason}): {body}")
        self.status = status
        self.reason = reason
        self.body = body


class CmsUnreachableError(IntegrationError):
    """The CMS host could not be reached."""


class CmsResponseError(IntegrationError):
    """The CMS answered with a success status but an unusable body."""
