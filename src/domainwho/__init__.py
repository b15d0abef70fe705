from __future__ import annotations

__all__ = ["LookupResponse", "handle_lookup", "sanitize_domain"]


def __getattr__(name: str):
    if name in {"LookupResponse", "handle_lookup", "sanitize_domain"}:
        from .handler import LookupResponse, handle_lookup, sanitize_domain

        return {
            "LookupResponse": LookupResponse,
            "handle_lookup": handle_lookup,
            "sanitize_domain": sanitize_domain,
        }[name]
    raise AttributeError(name)
