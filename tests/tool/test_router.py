from __future__ import annotations

import logging

import pytest

from domainwho_lookup.models import Domain, LookupOptions
from domainwho_lookup.router import RDAP_SERVERS, route


def _names(domain: str, options: LookupOptions | None = None) -> list[str]:
    return [spec.name for spec in route(Domain.parse(domain), options)]


def test_known_tld_starts_with_registry_and_ends_with_bootstrap() -> None:
    candidates = route(Domain.parse("example.com"))
    assert [spec.kind for spec in candidates] == ["rdap-registry", "rdap-bootstrap"]
    assert candidates[0].name == "rdap-registry:rdap.verisign.com"
    assert candidates[0].url_for(Domain.parse("example.com")) == "https://rdap.verisign.com/com/v1/domain/example.com"
    assert candidates[-1].url_for(Domain.parse("example.com")) == "https://rdap.org/domain/example.com"


def test_unknown_tld_uses_bootstrap_as_primary() -> None:
    assert _names("example.zz") == ["rdap-bootstrap:rdap.org"]


def test_aggregator_needs_a_key_by_default() -> None:
    assert "whois-aggregator:api.api-ninjas.com" not in _names("example.com")

    with_key = _names("example.com", LookupOptions(aggregator_api_key="k"))
    assert with_key == [
        "rdap-registry:rdap.verisign.com",
        "whois-aggregator:api.api-ninjas.com",
        "rdap-bootstrap:rdap.org",
    ]


def test_aggregator_without_key_requirement_is_included() -> None:
    options = LookupOptions(
        aggregator_endpoint="https://whois.example.net/lookup?d={domain}",
        aggregator_requires_api_key=False,
    )
    candidates = route(Domain.parse("example.zz"), options)
    assert [spec.kind for spec in candidates] == ["rdap-bootstrap", "whois-aggregator"]
    assert candidates[1].requires_api_key is False


def test_disabled_aggregator_is_skipped_even_with_key() -> None:
    options = LookupOptions(aggregator_api_key="k", enable_aggregator=False)
    assert _names("example.com", options) == ["rdap-registry:rdap.verisign.com", "rdap-bootstrap:rdap.org"]


def test_full_chain_order_with_proxy_and_fallback() -> None:
    options = LookupOptions(
        aggregator_api_key="k",
        rdap_proxy_endpoint="https://rdap-proxy.example.net/v1/{domain}",
        rdap_fallback_base="https://rdap.alt-registry.example/",
    )
    assert _names("example.org", options) == [
        "rdap-registry:rdap.publicinterestregistry.org",
        "rdap-proxy:rdap-proxy.example.net",
        "whois-aggregator:api.api-ninjas.com",
        "rdap-bootstrap:rdap.org",
        "rdap-registry:rdap.alt-registry.example",
    ]


def test_fallback_base_on_primary_host_is_not_repeated() -> None:
    options = LookupOptions(rdap_fallback_base="https://rdap.verisign.com/com/v1")
    assert _names("example.com", options) == ["rdap-registry:rdap.verisign.com", "rdap-bootstrap:rdap.org"]


def test_fallback_base_on_primary_host_with_another_path_is_kept() -> None:
    options = LookupOptions(rdap_fallback_base="https://rdap.verisign.com/net/v1/")
    candidates = route(Domain.parse("example.com"), options)
    assert [spec.name for spec in candidates] == [
        "rdap-registry:rdap.verisign.com",
        "rdap-bootstrap:rdap.org",
        "rdap-registry:rdap.verisign.com/net/v1/domain",
    ]
    assert candidates[-1].url_for(Domain.parse("example.com")) == "https://rdap.verisign.com/net/v1/domain/example.com"


def test_fallback_base_matching_bootstrap_is_dropped_with_a_debug_line(caplog) -> None:
    options = LookupOptions(rdap_fallback_base="https://rdap.org/")
    with caplog.at_level(logging.DEBUG, logger="domainwho_lookup.router"):
        assert _names("example.zz", options) == ["rdap-bootstrap:rdap.org"]
    assert "rdap-registry:rdap.org" in caplog.text


def test_candidates_carry_the_configured_timeout() -> None:
    candidates = route(Domain.parse("example.net"), LookupOptions(timeout_ms=12000))
    assert {spec.timeout_ms for spec in candidates} == {12000}


@pytest.mark.parametrize("domain", ["example.com", "a.example.io", "site.vn", "example.zz", "xn--bcher-kva.de"])
def test_route_is_non_empty_and_order_stable(domain: str) -> None:
    options = LookupOptions(aggregator_api_key="k", rdap_fallback_base="https://rdap.alt.example/")
    first = route(Domain.parse(domain), options)
    assert first
    for _ in range(5):
        assert route(Domain.parse(domain), options) == first
    assert len({spec.name for spec in first}) == len(first)


def test_every_table_entry_builds_a_domain_template() -> None:
    for tld in RDAP_SERVERS:
        primary = route(Domain.parse(f"example.{tld}"))[0]
        assert primary.kind == "rdap-registry"
        assert primary.endpoint_template.endswith("/domain/{domain}")
        assert "//domain" not in primary.endpoint_template
