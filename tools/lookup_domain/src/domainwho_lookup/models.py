from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from .errors import FailureReason, InvalidDomain


UNKNOWN = "unknown"
DEFAULT_TIMEOUT_MS = 10000
DEFAULT_BOOTSTRAP_ENDPOINT = "https://rdap.org/domain/{domain}"
DEFAULT_AGGREGATOR_ENDPOINT = "https://api.api-ninjas.com/v1/whois?domain={domain}"

LABEL_RE = re.compile(r"^(?!-)[a-z0-9-]{1,63}(?<!-)$")

SourceKind = Literal["rdap-registry", "rdap-bootstrap", "whois-aggregator", "rdap-proxy"]
RDAP_KINDS: frozenset[str] = frozenset({"rdap-registry", "rdap-bootstrap", "rdap-proxy"})
DnssecState = bool | Literal["unknown"]


def hostname_problem(value: str) -> str | None:
    """Return why ``value`` is not an acceptable hostname, or None when it is."""
    if not value:
        return "empty domain"
    if len(value) > 253:
        return "domain longer than 253 characters"
    labels = value.split(".")
    if len(labels) < 2:
        return "domain needs at least two labels"
    for label in labels:
        if not LABEL_RE.match(label):
            return f"invalid label {label!r}"
    if labels[-1].isdigit():
        return "top-level label cannot be numeric"
    return None


class Domain(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    fqdn: str

    @field_validator("fqdn")
    @classmethod
    def _check_hostname(cls, value: str) -> str:
        problem = hostname_problem(value)
        if problem:
            raise ValueError(problem)
        return value

    @property
    def tld(self) -> str:
        return self.fqdn.rsplit(".", maxsplit=1)[-1]

    @classmethod
    def parse(cls, raw: str) -> Domain:
        """Normalize ``raw`` and build a Domain, raising InvalidDomain on bad input."""
        candidate = str(raw).strip().lower()
        if candidate.endswith("."):
            candidate = candidate[:-1]
        if not candidate.isascii():
            try:
                candidate = candidate.encode("idna").decode("ascii")
            except UnicodeError as exc:
                raise InvalidDomain(f"invalid domain: {exc}", domain=str(raw)) from exc

        problem = hostname_problem(candidate)
        if problem:
            raise InvalidDomain(f"invalid domain: {problem}", domain=str(raw))
        return cls(fqdn=candidate)


class SourceSpec(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    kind: SourceKind
    endpoint_template: str
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, ge=100, le=60000)
    requires_api_key: bool = False
    api_key_header: str | None = None

    @field_validator("endpoint_template")
    @classmethod
    def _has_placeholder(cls, value: str) -> str:
        if "{domain}" not in value:
            raise ValueError("endpoint_template must contain {domain}")
        return value

    def url_for(self, domain: Domain) -> str:
        return self.endpoint_template.replace("{domain}", domain.fqdn)


class RawResponse(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    source_used: str
    kind: SourceKind
    url: str
    http_status: int
    fetched_at: datetime
    body: dict[str, Any]


class SourceAttempt(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", alias_generator=to_camel, populate_by_name=True)

    source: str
    reason: FailureReason
    detail: str | None = None
    http_status: int | None = None


class LookupRecord(BaseModel):
    """Registration fields as read from one upstream body."""

    model_config = ConfigDict(frozen=True, extra="forbid", alias_generator=to_camel, populate_by_name=True)

    registrar: str = UNKNOWN
    created: str = UNKNOWN
    updated: str = UNKNOWN
    expires: str = UNKNOWN
    nameservers: tuple[str, ...] = ()
    dnssec_enabled: DnssecState = UNKNOWN
    status: tuple[str, ...] = ()

    @field_validator("nameservers", "status")
    @classmethod
    def _dedupe(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(dict.fromkeys(value))

    @property
    def is_usable(self) -> bool:
        return self.registrar != UNKNOWN or self.created != UNKNOWN or bool(self.nameservers)


class LookupResult(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", alias_generator=to_camel, populate_by_name=True)

    domain: str
    registrar: str = UNKNOWN
    created: str = UNKNOWN
    updated: str = UNKNOWN
    expires: str = UNKNOWN
    nameservers: tuple[str, ...] = ()
    dnssec_enabled: DnssecState = UNKNOWN
    status: tuple[str, ...] = ()
    source: str
    resolved_at: str

    @classmethod
    def from_record(cls, record: LookupRecord, *, domain: str, source: str, resolved_at: str) -> LookupResult:
        return cls(domain=domain, source=source, resolved_at=resolved_at, **record.model_dump())


class NoRegistrationData(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", alias_generator=to_camel, populate_by_name=True)

    domain: str
    registered: Literal[False] = False
    message: str = "no registration data found"
    source: str
    attempted_sources: list[SourceAttempt] = Field(default_factory=list)
    resolved_at: str


class LookupOptions(BaseSettings):
    """Keyword arguments win over DOMAINWHO_* variables, which win over the JSON config file."""

    model_config = SettingsConfigDict(env_prefix="DOMAINWHO_", env_ignore_empty=True, extra="forbid")

    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, ge=100, le=60000)
    enable_aggregator: bool = True
    aggregator_endpoint: str = DEFAULT_AGGREGATOR_ENDPOINT
    aggregator_requires_api_key: bool = True
    aggregator_api_key: SecretStr | None = None
    aggregator_api_key_header: str = "X-Api-Key"
    bootstrap_endpoint: str = DEFAULT_BOOTSTRAP_ENDPOINT
    rdap_proxy_endpoint: str | None = None
    rdap_fallback_base: str | None = None
    user_agent: str = "domainwho/0.1.0 (+https://rdap.org)"

    @field_validator("aggregator_endpoint", "bootstrap_endpoint", "rdap_proxy_endpoint")
    @classmethod
    def _has_placeholder(cls, value: str | None) -> str | None:
        if value is not None and "{domain}" not in value:
            raise ValueError("endpoint must contain {domain}")
        return value

    def api_key(self) -> str | None:
        if self.aggregator_api_key is None:
            return None
        return self.aggregator_api_key.get_secret_value() or None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from .config import ConfigFileSettingsSource

        return init_settings, env_settings, ConfigFileSettingsSource(settings_cls)


class LookupRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    domain: str = Field(min_length=1, max_length=1024)
    options: LookupOptions = Field(default_factory=LookupOptions)
