"""Map upstream registration bodies onto one LookupRecord shape.

Every function here is total: malformed or missing input degrades to the
``unknown`` marker (or an empty tuple) and never raises.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

from dateutil import parser as date_parser

from .models import RDAP_KINDS, UNKNOWN, DnssecState, LookupRecord, SourceKind


DNSSEC_TRUE = {"signeddelegation", "signed", "yes", "true", "active"}
DNSSEC_FALSE = {"unsigned", "no", "false", "inactive"}

# Two unrelated fill-in values; a string that needs either one to become a date is incomplete.
_DEFAULT_A = datetime(2000, 1, 1)
_DEFAULT_B = datetime(2011, 12, 28)


def format_event_date(value: Any) -> str:
    """Reduce a timestamp to ``YYYY-MM-DD`` in UTC, or ``unknown``."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None or isinstance(value, bool):
        return UNKNOWN

    try:
        if isinstance(value, (int, float)):
            parsed = datetime.fromtimestamp(value, tz=timezone.utc)
        elif isinstance(value, str) and value.strip():
            parsed = date_parser.parse(value.strip(), default=_DEFAULT_A)
            if parsed != date_parser.parse(value.strip(), default=_DEFAULT_B):
                return UNKNOWN
        else:
            return UNKNOWN
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError, OSError, TypeError):
        return UNKNOWN
    return parsed.date().isoformat()


def _clean_text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def _hostname(value: Any) -> str | None:
    text = _clean_text(value)
    if text is None:
        return None
    return text.lower().rstrip(".") or None


def _first(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value not in (None, "", []):
            return value
    return None


def _vcard_value(entity: dict[str, Any], prop: str) -> str | None:
    vcard = entity.get("vcardArray")
    if not isinstance(vcard, list) or len(vcard) < 2 or not isinstance(vcard[1], list):
        return None
    for item in vcard[1]:
        if isinstance(item, list) and len(item) >= 4 and item[0] == prop:
            value = item[3]
            # org may carry a structured (list) value
            if isinstance(value, list):
                value = next((part for part in value if _clean_text(part)), None)
            if text := _clean_text(value):
                return text
    return None


def _rdap_registrar(data: dict[str, Any]) -> str:
    for entity in _as_list(data.get("entities")):
        if not isinstance(entity, dict):
            continue
        roles = entity.get("roles")
        if not isinstance(roles, list) or "registrar" not in roles:
            continue
        name = _vcard_value(entity, "fn") or _vcard_value(entity, "org")
        if name:
            return name
    return UNKNOWN


def _rdap_event_date(data: dict[str, Any], action: str) -> str:
    for event in _as_list(data.get("events")):
        if isinstance(event, dict) and event.get("eventAction") == action:
            return format_event_date(event.get("eventDate"))
    return UNKNOWN


def _rdap_nameservers(data: dict[str, Any]) -> tuple[str, ...]:
    hosts: list[str] = []
    for entry in _as_list(data.get("nameservers")):
        if not isinstance(entry, dict):
            continue
        host = _hostname(entry.get("ldhName")) or _hostname(entry.get("unicodeName"))
        if host:
            hosts.append(host)
    return tuple(hosts)


def _rdap_dnssec(data: dict[str, Any]) -> DnssecState:
    secure_dns = data.get("secureDNS")
    if isinstance(secure_dns, dict) and isinstance(secure_dns.get("delegationSigned"), bool):
        return secure_dns["delegationSigned"]
    return UNKNOWN


def _status_codes(value: Any) -> tuple[str, ...]:
    return tuple(code for code in (_clean_text(item) for item in _as_list(value)) if code)


def normalize_rdap(data: dict[str, Any]) -> LookupRecord:
    return LookupRecord(
        registrar=_rdap_registrar(data),
        created=_rdap_event_date(data, "registration"),
        updated=_rdap_event_date(data, "last changed"),
        expires=_rdap_event_date(data, "expiration"),
        nameservers=_rdap_nameservers(data),
        dnssec_enabled=_rdap_dnssec(data),
        status=_status_codes(data.get("status")),
    )


def _aggregator_registrar(value: Any) -> str:
    if isinstance(value, dict):
        value = value.get("name")
    return _clean_text(value) or UNKNOWN


def _aggregator_nameservers(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        value = value.replace(",", " ").split()
    return tuple(host for host in (_hostname(item) for item in _as_list(value)) if host)


def _aggregator_dnssec(value: Any) -> DnssecState:
    if isinstance(value, bool):
        return value
    text = _clean_text(value)
    if text is None:
        return UNKNOWN
    lowered = text.lower()
    if lowered in DNSSEC_TRUE:
        return True
    if lowered in DNSSEC_FALSE:
        return False
    return UNKNOWN


def normalize_whois_aggregator(data: dict[str, Any]) -> LookupRecord:
    return LookupRecord(
        registrar=_aggregator_registrar(data.get("registrar")),
        created=format_event_date(_first(data, "created", "creation_date", "created_date")),
        updated=format_event_date(_first(data, "updated", "updated_date")),
        expires=format_event_date(_first(data, "expires", "expiration_date", "expiry_date")),
        nameservers=_aggregator_nameservers(_first(data, "nameservers", "name_servers")),
        dnssec_enabled=_aggregator_dnssec(data.get("dnssec")),
        status=_status_codes(_first(data, "status", "domain_status")),
    )


_EXTRACTORS: dict[str, Callable[[dict[str, Any]], LookupRecord]] = {
    **{kind: normalize_rdap for kind in RDAP_KINDS},
    "whois-aggregator": normalize_whois_aggregator,
}


def normalize(kind: SourceKind, raw: Any) -> LookupRecord:
    if not isinstance(raw, dict):
        return LookupRecord()
    return _EXTRACTORS[kind](raw)
