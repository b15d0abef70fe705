from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys

EXIT_CODES = {200: 0, 400: 2, 502: 3}


def _supports_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    return sys.stdout.isatty()


def _ansi(text: str, code: str, *, enabled: bool) -> str:
    if not enabled:
        return text
    return f"\033[{code}m{text}\033[0m"


def _value_label(value: object, *, color: bool) -> str:
    if value == "unknown":
        return _ansi("unknown", "1;33", enabled=color)
    if value is True:
        return _ansi("signed", "1;32", enabled=color)
    if value is False:
        return _ansi("unsigned", "1;31", enabled=color)
    return str(value)


def _render_user_report(body: dict) -> str:
    color = _supports_color()
    lines: list[str] = []

    if "error" in body:
        lines.append(_ansi("Lookup failed", "1;31", enabled=color))
        lines.append(f"Domain: {body.get('domain') or '-'}")
        lines.append(f"Reason: {body['error']} ({body.get('kind', 'error')})")
        attempts = body.get("attemptedSources", [])
        if attempts:
            lines.append("")
            lines.append(_ansi("Sources tried", "1;34", enabled=color))
            for idx, attempt in enumerate(attempts, start=1):
                detail = attempt.get("detail")
                suffix = f" - {detail}" if detail else ""
                lines.append(f"{idx:02d}. {attempt['source']:<45} {attempt['reason']}{suffix}")
        return "\n".join(lines) + "\n"

    if body.get("registered") is False:
        lines.append(_ansi("No registration data", "1;33", enabled=color))
        lines.append(f"Domain: {body['domain']}")
        lines.append(f"Checked last at: {body['source']}")
        skipped = body.get("attemptedSources", [])
        if skipped:
            lines.append(f"Earlier sources without an answer: {', '.join(a['source'] for a in skipped)}")
        return "\n".join(lines) + "\n"

    lines.append(_ansi("Registration data", "1;36", enabled=color))
    lines.append(f"Domain:     {body['domain']}")
    lines.append(f"Registrar:  {_value_label(body['registrar'], color=color)}")
    lines.append(f"Created:    {_value_label(body['created'], color=color)}")
    lines.append(f"Updated:    {_value_label(body['updated'], color=color)}")
    lines.append(f"Expires:    {_value_label(body['expires'], color=color)}")
    lines.append(f"DNSSEC:     {_value_label(body['dnssecEnabled'], color=color)}")

    nameservers = body.get("nameservers", [])
    lines.append("")
    lines.append(_ansi("Nameservers", "1;34", enabled=color))
    if nameservers:
        for idx, host in enumerate(nameservers, start=1):
            lines.append(f"{idx:02d}. {host}")
    else:
        lines.append("none listed")

    status = body.get("status", [])
    if status:
        lines.append("")
        lines.append(_ansi("Status", "1;35", enabled=color) + ": " + ", ".join(status))

    lines.append("")
    lines.append(f"Source: {body['source']} at {body['resolvedAt']}")
    return "\n".join(lines) + "\n"


def main(argv: list[str] | None = None) -> int:
    from pydantic import ValidationError

    from domainwho_lookup.config import load_options
    from domainwho_lookup.logging import configure_logging

    from .handler import handle_lookup

    parser = argparse.ArgumentParser(description="Show who owns a domain and when it expires")
    parser.add_argument("domain")
    parser.add_argument("--json", action="store_true", help="Print the raw JSON body")
    parser.add_argument("--timeout-ms", type=int, help="Per-source timeout in milliseconds")
    parser.add_argument("--no-aggregator", action="store_true", help="Skip the WHOIS aggregator source")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        options = load_options(
            timeout_ms=args.timeout_ms,
            enable_aggregator=False if args.no_aggregator else None,
        )
    except ValidationError as exc:
        parser.error(f"invalid configuration: {exc}")

    response = asyncio.run(handle_lookup({"domain": args.domain}, options))
    if args.json:
        sys.stdout.write(json.dumps(response.body, indent=2) + "\n")
    else:
        sys.stdout.write(_render_user_report(response.body))
    return EXIT_CODES.get(response.status_code, 1)


if __name__ == "__main__":
    raise SystemExit(main())
