from __future__ import annotations

import logging
from urllib.parse import urlsplit

from .models import Domain, LookupOptions, SourceKind, SourceSpec


logger = logging.getLogger(__name__)


# Authoritative RDAP bases for TLDs whose registry servers are known to be stable.
RDAP_SERVERS: dict[str, str] = {
    "com": "https://rdap.verisign.com/com/v1/",
    "net": "https://rdap.verisign.com/net/v1/",
    "org": "https://rdap.publicinterestregistry.org/rdap/",
    "info": "https://rdap.identitydigital.services/rdap/",
    "io": "https://rdap.identitydigital.services/rdap/",
    "dev": "https://pubapi.registry.google/rdap/",
    "app": "https://pubapi.registry.google/rdap/",
    "page": "https://pubapi.registry.google/rdap/",
    "xyz": "https://rdap.centralnic.com/xyz/",
    "uk": "https://rdap.nominet.uk/uk/",
    "nl": "https://rdap.sidn.nl/",
    "fr": "https://rdap.nic.fr/",
    "br": "https://rdap.registro.br/",
    "vn": "https://rdap.vnnic.vn/rdap/",
}


def _source_name(kind: SourceKind, endpoint_template: str) -> str:
    host = urlsplit(endpoint_template).netloc.lower() or endpoint_template
    return f"{kind}:{host}"


def _qualified_name(spec: SourceSpec) -> str:
    """Name a source by host and path when another source already uses its host."""
    parts = urlsplit(spec.endpoint_template)
    path = parts.path.split("{domain}")[0].rstrip("/")
    return f"{spec.kind}:{parts.netloc.lower()}{path}"


def _rdap_domain_template(base: str) -> str:
    return f"{base.rstrip('/')}/domain/{{domain}}"


def _source(kind: SourceKind, endpoint_template: str, options: LookupOptions, **extra) -> SourceSpec:
    return SourceSpec(
        name=_source_name(kind, endpoint_template),
        kind=kind,
        endpoint_template=endpoint_template,
        timeout_ms=options.timeout_ms,
        **extra,
    )


def _aggregator_source(options: LookupOptions) -> SourceSpec | None:
    if not options.enable_aggregator:
        return None
    if options.aggregator_requires_api_key and not options.api_key():
        return None
    return _source(
        "whois-aggregator",
        options.aggregator_endpoint,
        options,
        requires_api_key=options.aggregator_requires_api_key,
        api_key_header=options.aggregator_api_key_header,
    )


def route(domain: Domain, options: LookupOptions | None = None) -> list[SourceSpec]:
    """Ordered upstream candidates for ``domain``; never empty, never does I/O."""
    options = options or LookupOptions()
    registry_base = RDAP_SERVERS.get(domain.tld)
    bootstrap = _source("rdap-bootstrap", options.bootstrap_endpoint, options)

    candidates: list[SourceSpec | None] = []
    if registry_base:
        candidates.append(_source("rdap-registry", _rdap_domain_template(registry_base), options))
    else:
        candidates.append(bootstrap)

    if options.rdap_proxy_endpoint:
        candidates.append(_source("rdap-proxy", options.rdap_proxy_endpoint, options))

    candidates.append(_aggregator_source(options))

    if registry_base:
        candidates.append(bootstrap)
    if options.rdap_fallback_base:
        candidates.append(_source("rdap-registry", _rdap_domain_template(options.rdap_fallback_base), options))

    ordered: list[SourceSpec] = []
    for spec in candidates:
        if spec is None:
            continue
        if any(kept.endpoint_template == spec.endpoint_template for kept in ordered):
            logger.debug("Dropping %s for %s: endpoint already queued", spec.name, domain.fqdn)
            continue
        if any(kept.name == spec.name for kept in ordered):
            spec = spec.model_copy(update={"name": _qualified_name(spec)})
        ordered.append(spec)
    return ordered
