"""Command-line interface for the farming advisory service."""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from agrisense.config import get_settings
from agrisense.models.observation import Observation
from agrisense.rules.engine import RuleEngine
from agrisense.rules.loader import RuleTableError, load_rule_table

logger = logging.getLogger(__name__)


def _evaluate(args: argparse.Namespace) -> int:
    """Evaluate an observation file and print context and advisories."""
    try:
        payload = json.loads(Path(args.observation).read_text(encoding="utf-8"))
        observation = Observation.from_payloads(payload["current"], payload.get("forecast"))
    except (OSError, ValueError, KeyError, TypeError) as e:
        # ValidationError is a ValueError
        print(f"Cannot read observation {args.observation}: {e}", file=sys.stderr)
        return 1

    try:
        engine = RuleEngine.from_file(args.rules or get_settings().rules_path)
    except RuleTableError as e:
        print(str(e), file=sys.stderr)
        return 1

    result = engine.evaluate(observation)
    output = {
        "rules_version": result.rules_version,
        "context": result.context.model_dump(),
        "advisories": [a.model_dump(mode="json") for a in result.advisories],
    }
    print(json.dumps(output, indent=2))
    return 0


def _validate_rules(args: argparse.Namespace) -> int:
    """Strictly validate a rule file."""
    path = args.path or get_settings().rules_path
    try:
        table = load_rule_table(path, strict=True)
    except RuleTableError as e:
        print(str(e), file=sys.stderr)
        return 1

    print(f"{path}: {len(table)} rules OK (version {table.version or 'unversioned'})")
    return 0


def _serve(args: argparse.Namespace) -> int:
    """Run the API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "agrisense.api.app:create_app",
        factory=True,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="AgriSense - Farming advisories from weather conditions"
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Evaluate command
    evaluate_parser = subparsers.add_parser(
        "evaluate", help="Evaluate advisory rules for a saved observation"
    )
    evaluate_parser.add_argument(
        "observation",
        help='JSON file with {"current": ..., "forecast": ...} provider payloads',
    )
    evaluate_parser.add_argument(
        "--rules",
        help="Rule table to use (default: configured rules path)",
    )
    evaluate_parser.set_defaults(handler=_evaluate)

    # Validate command
    validate_parser = subparsers.add_parser(
        "validate-rules", help="Check a rule table for malformed rules"
    )
    validate_parser.add_argument(
        "path",
        nargs="?",
        help="Rule table to check (default: configured rules path)",
    )
    validate_parser.set_defaults(handler=_validate_rules)

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", help="Bind address")
    serve_parser.add_argument("--port", type=int, help="Bind port")
    serve_parser.set_defaults(handler=_serve)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
