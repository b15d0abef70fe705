from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path


def _read_payload(input_path: str | None) -> dict:
    if input_path:
        return json.loads(Path(input_path).read_text())
    return json.loads(sys.stdin.read())


def _write_output(payload: dict, output_path: str | None) -> None:
    rendered = json.dumps(payload, indent=2)
    if output_path:
        Path(output_path).write_text(rendered + "\n")
    else:
        sys.stdout.write(rendered + "\n")


def main(argv: list[str] | None = None) -> int:
    from pydantic import ValidationError

    from .config import load_options
    from .errors import AllSourcesExhausted, InvalidDomain
    from .executor import lookup_domain
    from .logging import configure_logging
    from .models import LookupRequest

    parser = argparse.ArgumentParser(description="Resolve registration data for one domain")
    parser.add_argument("--domain", help="Domain to look up (skips reading a JSON payload)")
    parser.add_argument("--input", help="Path to JSON input payload")
    parser.add_argument("--output", help="Path to JSON output payload")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        if args.domain:
            request = LookupRequest(domain=args.domain, options=load_options())
        else:
            raw = _read_payload(args.input)
            if isinstance(raw, dict) and "options" not in raw:
                raw = {**raw, "options": load_options()}
            request = LookupRequest.model_validate(raw)
    except (json.JSONDecodeError, OSError, ValidationError) as exc:
        sys.stderr.write(f"Input validation error: {exc}\n")
        return 2

    try:
        outcome = asyncio.run(lookup_domain(request.domain, request.options))
    except InvalidDomain as exc:
        _write_output(exc.to_payload(), args.output)
        return 2
    except AllSourcesExhausted as exc:
        _write_output(exc.to_payload(), args.output)
        return 3

    _write_output(outcome.model_dump(mode="json", by_alias=True, exclude_none=True), args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
