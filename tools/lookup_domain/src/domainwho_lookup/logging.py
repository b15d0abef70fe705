from __future__ import annotations

import json
import logging
from collections import Counter

from . import __version__
from .errors import DomainLookupError, utc_now_iso
from .models import LookupResult, NoRegistrationData, SourceAttempt, SourceSpec


summary_logger = logging.getLogger("domainwho_lookup.summary")


def build_lookup_summary(
    domain: str,
    candidates: list[SourceSpec],
    outcome: LookupResult | NoRegistrationData | DomainLookupError,
    attempts: list[SourceAttempt],
) -> dict:
    if isinstance(outcome, LookupResult):
        kind, source = "found", outcome.source
    elif isinstance(outcome, NoRegistrationData):
        kind, source = "no_registration_data", outcome.source
    else:
        kind, source = outcome.kind, None

    return {
        "timestamp": utc_now_iso(),
        "tool_version": __version__,
        "domain": domain,
        "outcome": kind,
        "source": source,
        "candidates": [spec.name for spec in candidates],
        "failures": dict(Counter(attempt.reason for attempt in attempts)),
    }


def log_lookup_summary(
    domain: str,
    candidates: list[SourceSpec],
    outcome: LookupResult | NoRegistrationData | DomainLookupError,
    attempts: list[SourceAttempt],
) -> None:
    summary_logger.info(json.dumps(build_lookup_summary(domain, candidates, outcome, attempts), sort_keys=True))


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
