"""
Option loading for domainwho lookups.

Lookup order (later wins):
1. LookupOptions defaults
2. JSON config file ($DOMAINWHO_CONFIG, else $XDG_CONFIG_HOME/domainwho/config.json)
3. DOMAINWHO_<FIELD> environment variables, e.g. DOMAINWHO_TIMEOUT_MS
4. Explicit keyword overrides
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping

from pydantic.fields import FieldInfo
from pydantic_settings import PydanticBaseSettingsSource

from .models import LookupOptions


logger = logging.getLogger(__name__)


def get_config_file(environ: Mapping[str, str] | None = None) -> Path:
    """Get the path to the config file."""
    environ = os.environ if environ is None else environ
    if explicit := environ.get("DOMAINWHO_CONFIG"):
        return Path(explicit)
    if os.name == "nt":
        base = Path(environ.get("APPDATA", Path.home()))
    else:
        base = Path(environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / "domainwho" / "config.json"


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        if path.exists():
            data = json.loads(path.read_text())
            if isinstance(data, dict):
                return data
            logger.warning("Ignoring config file %s: top level is not an object", path)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Ignoring config file %s: %s", path, exc)
    return {}


class ConfigFileSettingsSource(PydanticBaseSettingsSource):
    """The JSON config file as one settings source; an unreadable file contributes nothing."""

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        # values come from __call__ in one piece
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        return _read_config_file(get_config_file())


def load_options(**overrides: Any) -> LookupOptions:
    """Build LookupOptions from the config file, the environment and explicit overrides.

    Overrides that are None are ignored. Invalid values raise pydantic's ValidationError.
    """
    return LookupOptions(**{key: value for key, value in overrides.items() if value is not None})
