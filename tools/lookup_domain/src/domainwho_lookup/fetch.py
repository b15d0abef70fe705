from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone

import httpx

from .errors import SourceFailure
from .models import Domain, LookupOptions, RawResponse, SourceSpec


ACCEPT = "application/rdap+json, application/json"

logger = logging.getLogger(__name__)


def _request_headers(spec: SourceSpec, options: LookupOptions) -> dict[str, str]:
    headers = {"Accept": ACCEPT, "User-Agent": options.user_agent}
    if spec.requires_api_key and spec.api_key_header:
        api_key = options.api_key()
        if api_key:
            headers[spec.api_key_header] = api_key
    return headers


async def fetch_source(
    domain: Domain,
    spec: SourceSpec,
    options: LookupOptions,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RawResponse:
    """Issue one GET against ``spec`` and return its JSON body.

    The client lives only for this call and is closed on every exit path. The
    whole exchange, redirects included, is bounded by ``spec.timeout_ms``.
    Any failure is raised as SourceFailure.
    """
    url = spec.url_for(domain)
    timeout_s = spec.timeout_ms / 1000
    timeout = httpx.Timeout(timeout_s, connect=timeout_s, read=timeout_s, write=timeout_s, pool=timeout_s)

    try:
        async with httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            follow_redirects=True,
            headers=_request_headers(spec, options),
        ) as client:
            response = await asyncio.wait_for(client.get(url), timeout=timeout_s)
    except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
        raise SourceFailure("SourceTimeout", f"no response within {spec.timeout_ms} ms") from exc
    except httpx.HTTPError as exc:
        raise SourceFailure("SourceUnreachable", str(exc) or type(exc).__name__) from exc

    logger.debug("%s answered HTTP %s for %s", spec.name, response.status_code, domain.fqdn)
    if not response.is_success:
        raise SourceFailure("SourceHttpError", f"HTTP {response.status_code}", response.status_code)

    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SourceFailure("SourceUnparsable", "response body is not JSON", response.status_code) from exc
    if not isinstance(body, dict):
        raise SourceFailure("SourceUnparsable", "response body is not a JSON object", response.status_code)

    return RawResponse(
        source_used=spec.name,
        kind=spec.kind,
        url=str(response.url),
        http_status=response.status_code,
        fetched_at=datetime.now(timezone.utc),
        body=body,
    )
