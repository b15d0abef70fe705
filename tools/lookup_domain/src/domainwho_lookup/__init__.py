from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["execute", "lookup_domain", "normalize", "route"]


def __getattr__(name: str):
    if name in {"execute", "lookup_domain"}:
        from .executor import execute, lookup_domain

        return {"execute": execute, "lookup_domain": lookup_domain}[name]
    if name == "normalize":
        from .normalizer import normalize

        return normalize
    if name == "route":
        from .router import route

        return route
    raise AttributeError(name)
