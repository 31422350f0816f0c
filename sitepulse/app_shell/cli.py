import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from sitepulse.components.dashboard import DeriveViewsInput, run_derive
from sitepulse.rules.adapters import DashboardRulesAdapter
from sitepulse.rules.loader import load_rules
from sitepulse.rules.models import Rules

logger = logging.getLogger("cli")

RULES_PATH = "rules.yaml"


def get_rules(path: str | None) -> Rules:
    rules_path = Path(path or RULES_PATH)
    if not rules_path.exists():
        if path:
            logger.error("Rules file %s not found.", rules_path)
            sys.exit(1)
        return Rules()
    return load_rules(rules_path)


def handle_derive(rules: Rules, args: argparse.Namespace) -> int:
    snapshot_path = Path(args.snapshot)
    try:
        with open(snapshot_path, encoding="utf-8") as f:
            snapshot = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Cannot read snapshot %s: %s", snapshot_path, e)
        return 1

    result = run_derive(
        DeriveViewsInput(snapshot=snapshot, room_sort=args.room_sort),
        rules=DashboardRulesAdapter(rules),
    )

    if not result.success or result.views is None:
        for err in result.errors:
            location = f" ({err.field_name})" if err.field_name else ""
            logger.error("%s%s: %s", err.code, location, err.message)
        return 2

    print(json.dumps(asdict(result.views), indent=args.indent, default=str))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Sitepulse dashboard tools")
    parser.add_argument("--rules", help=f"Rules file (default: {RULES_PATH})")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # derive
    derive_parser = subparsers.add_parser("derive", help="Derive dashboard views from a snapshot")
    derive_parser.add_argument("snapshot", help="Path to an analytics snapshot JSON file")
    derive_parser.add_argument("--room-sort", default=None, help="Room leaderboard sort key")
    derive_parser.add_argument("--indent", type=int, default=2, help="JSON indent")

    args = parser.parse_args(argv)

    rules = get_rules(args.rules)
    logging.basicConfig(level=rules.logging.level, format=rules.logging.format)

    if args.command == "derive":
        return handle_derive(rules, args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
