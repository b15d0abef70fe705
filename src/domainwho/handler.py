from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Mapping

import httpx
import jsonschema

from domainwho_lookup.errors import AllSourcesExhausted, InvalidDomain
from domainwho_lookup.executor import lookup_domain
from domainwho_lookup.models import LookupOptions

from .schema_utils import REQUEST_SCHEMA, response_schema_for, validate_payload

SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)
HOST_END_RE = re.compile(r"[/?#]")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LookupResponse:
    status_code: int
    body: dict


def sanitize_domain(raw: str) -> str:
    """Reduce a pasted URL or hostname to the bare lowercase host."""
    candidate = SCHEME_RE.sub("", raw.strip())
    candidate = HOST_END_RE.split(candidate, maxsplit=1)[0]
    candidate = candidate.rsplit("@", maxsplit=1)[-1]
    host, sep, port = candidate.rpartition(":")
    if sep and port.isdigit():
        candidate = host
    return candidate.rstrip(".").lower()


def _respond(status_code: int, body: dict) -> LookupResponse:
    validate_payload(body, response_schema_for(body))
    return LookupResponse(status_code=status_code, body=body)


async def handle_lookup(
    query: Mapping[str, str],
    options: LookupOptions | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> LookupResponse:
    """Serve one ``?domain=`` request and return an HTTP status with a JSON body."""
    try:
        validate_payload(dict(query), REQUEST_SCHEMA)
    except jsonschema.ValidationError:
        error = InvalidDomain("missing domain parameter", domain=str(query.get("domain") or ""))
        return _respond(400, error.to_payload())

    domain = sanitize_domain(query["domain"])
    try:
        outcome = await lookup_domain(domain, options, transport=transport)
    except InvalidDomain as exc:
        return _respond(400, exc.to_payload())
    except AllSourcesExhausted as exc:
        logger.warning("Lookup exhausted for %s after %d sources", exc.domain, len(exc.attempted))
        return _respond(502, exc.to_payload())

    return _respond(200, outcome.model_dump(mode="json", by_alias=True, exclude_none=True))
