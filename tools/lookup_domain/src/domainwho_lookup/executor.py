from __future__ import annotations

import logging

import httpx

from .errors import AllSourcesExhausted, SourceFailure, utc_now_iso
from .fetch import fetch_source
from .logging import log_lookup_summary
from .models import Domain, LookupOptions, LookupResult, NoRegistrationData, SourceAttempt, SourceSpec
from .normalizer import normalize
from .router import route


logger = logging.getLogger(__name__)


async def _walk_candidates(
    domain: Domain,
    candidates: list[SourceSpec],
    options: LookupOptions,
    attempts: list[SourceAttempt],
    transport: httpx.AsyncBaseTransport | None,
) -> LookupResult | NoRegistrationData:
    last_index = len(candidates) - 1

    for index, spec in enumerate(candidates):
        try:
            raw = await fetch_source(domain, spec, options, transport=transport)
        except SourceFailure as failure:
            if failure.http_status == 404 and index == last_index:
                logger.info("%s has no registration data at %s", domain.fqdn, spec.name)
                return NoRegistrationData(
                    domain=domain.fqdn,
                    source=spec.name,
                    attempted_sources=list(attempts),
                    resolved_at=utc_now_iso(),
                )
            logger.info("%s failed for %s: %s (%s)", spec.name, domain.fqdn, failure.reason, failure.detail)
            attempts.append(
                SourceAttempt(
                    source=spec.name,
                    reason=failure.reason,
                    detail=failure.detail,
                    http_status=failure.http_status,
                )
            )
            continue

        record = normalize(spec.kind, raw.body)
        if record.is_usable:
            logger.info("%s resolved by %s", domain.fqdn, spec.name)
            return LookupResult.from_record(
                record,
                domain=domain.fqdn,
                source=spec.name,
                resolved_at=utc_now_iso(),
            )

        logger.warning("%s returned HTTP %s without usable fields for %s", spec.name, raw.http_status, domain.fqdn)
        attempts.append(
            SourceAttempt(
                source=spec.name,
                reason="SourceEmpty",
                detail="no registrar, creation date or nameservers in body",
                http_status=raw.http_status,
            )
        )

    raise AllSourcesExhausted(
        f"all {len(candidates)} sources failed for {domain.fqdn}",
        domain=domain.fqdn,
        attempted=list(attempts),
    )


async def execute(
    domain: Domain,
    candidates: list[SourceSpec],
    options: LookupOptions | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> LookupResult | NoRegistrationData:
    """Try ``candidates`` in order and return the first usable record.

    A 404 ends the chain as NoRegistrationData only when it comes from the
    last candidate. Raises AllSourcesExhausted when nothing usable came back.
    Every call logs one summary line with the failures met on the way.
    """
    options = options or LookupOptions()
    attempts: list[SourceAttempt] = []
    try:
        outcome = await _walk_candidates(domain, candidates, options, attempts, transport)
    except AllSourcesExhausted as exc:
        log_lookup_summary(domain.fqdn, candidates, exc, attempts)
        raise
    log_lookup_summary(domain.fqdn, candidates, outcome, attempts)
    return outcome


async def lookup_domain(
    raw_domain: str,
    options: LookupOptions | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> LookupResult | NoRegistrationData:
    """Parse, route and resolve one domain.

    Raises InvalidDomain before any network call for malformed input, and
    AllSourcesExhausted when every candidate failed.
    """
    options = options or LookupOptions()
    domain = Domain.parse(raw_domain)
    return await execute(domain, route(domain, options), options, transport=transport)
