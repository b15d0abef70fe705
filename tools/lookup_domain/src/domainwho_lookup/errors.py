from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from .models import SourceAttempt


FailureReason = Literal[
    "SourceTimeout",
    "SourceUnreachable",
    "SourceHttpError",
    "SourceUnparsable",
    "SourceEmpty",
]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class DomainLookupError(Exception):
    """Base for the errors a lookup surfaces to its caller."""

    kind = "DomainLookupError"

    def __init__(self, message: str, *, domain: str, attempted: list[SourceAttempt] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.domain = domain
        self.attempted = list(attempted or [])

    def to_payload(self, timestamp: str | None = None) -> dict[str, Any]:
        return {
            "error": self.message,
            "kind": self.kind,
            "domain": self.domain,
            "attemptedSources": [
                attempt.model_dump(mode="json", by_alias=True, exclude_none=True) for attempt in self.attempted
            ],
            "timestamp": timestamp or utc_now_iso(),
        }


class InvalidDomain(DomainLookupError):
    kind = "InvalidDomain"


class AllSourcesExhausted(DomainLookupError):
    kind = "AllSourcesExhausted"


class SourceFailure(Exception):
    """One upstream call failed; the executor turns this into a chain-advance decision."""

    def __init__(self, reason: FailureReason, detail: str, http_status: int | None = None) -> None:
        super().__init__(f"{reason}: {detail}")
        self.reason = reason
        self.detail = detail
        self.http_status = http_status
