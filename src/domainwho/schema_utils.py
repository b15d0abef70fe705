from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

import jsonschema


ROOT = Path(__file__).resolve().parents[2]
SCHEMAS_DIR = ROOT / "schemas"

RESULT_SCHEMA = "lookup_result.schema.json"
NO_DATA_SCHEMA = "no_registration_data.schema.json"
ERROR_SCHEMA = "lookup_error.schema.json"
REQUEST_SCHEMA = "lookup_request.schema.json"


@lru_cache(maxsize=None)
def load_schema(name: str) -> dict:
    return json.loads((SCHEMAS_DIR / name).read_text())


def validate_payload(payload: dict, schema_name: str) -> None:
    jsonschema.validate(payload, load_schema(schema_name))


def response_schema_for(body: dict) -> str:
    if "error" in body:
        return ERROR_SCHEMA
    if body.get("registered") is False:
        return NO_DATA_SCHEMA
    return RESULT_SCHEMA
