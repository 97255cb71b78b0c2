from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .deployment import load_deployment_file, save_deployment_file
from .errors import ConfigurationError, DeploymentImportError
from .models import CollectorGroup, SiteSizing
from .report import collectors_frame, sites_frame, write_csv
from .settings import Settings, get_default_config, setup_logging
from .sizer import size_deployment
from .state import add_site, set_failover, set_max_load


def _describe(group: CollectorGroup) -> str:
    if not group.collectors:
        return "none"
    text = f"{len(group.primaries)} x {group.size} @ {group.average_load}%"
    if group.redundant:
        text += " + N+1"
    return text


def _print_site(s: SiteSizing) -> None:
    print(f"{s.site_name}")
    print(f"  Devices: {s.device_total}, polling load: {s.total_weight:,.1f}, log EPS: {s.total_eps:,.0f}")
    print(f"  Polling collectors: {_describe(s.allocation.polling)}")
    print(f"  Logs/NetFlow collectors: {_describe(s.allocation.logs)}")


def cmd_size(args: argparse.Namespace, settings: Settings) -> int:
    try:
        config = get_default_config(settings)
        result = load_deployment_file(args.input, config, apply_capacities=args.use_file_capacities)
        config = result.config
        if args.max_load is not None:
            config = set_max_load(config, args.max_load)
        if args.polling_failover or args.logs_failover:
            config = set_failover(
                config,
                polling=True if args.polling_failover else None,
                logs=True if args.logs_failover else None,
            )
    except (OSError, UnicodeDecodeError) as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 2
    except DeploymentImportError as e:
        print("Import error:", file=sys.stderr)
        for p in e.problems or [str(e)]:
            print(f"- {p}", file=sys.stderr)
        return 2
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    if result.warnings:
        print("Warnings:", file=sys.stderr)
        for w in result.warnings:
            print(f"- {w}", file=sys.stderr)

    sizing = size_deployment(result.sites, config)

    print(f"Deployment: {sizing.deployment_name} (max load {config.max_load:g}%)")
    for s in sizing.sites:
        _print_site(s)

    if args.output:
        Path(args.output).write_text(sizing.model_dump_json(indent=2))
    if args.csv:
        write_csv(sites_frame(sizing), args.csv)
    if args.collectors_csv:
        write_csv(collectors_frame(sizing), args.collectors_csv)
    return 0


def cmd_template(args: argparse.Namespace, settings: Settings) -> int:
    try:
        config = get_default_config(settings)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    sites = []
    for _ in range(max(1, args.sites)):
        sites = add_site(config, sites)
    path = save_deployment_file(args.output, sites, config)
    print(f"Wrote {path} ({len(sites)} site(s), {len(config.device_defaults)} device types)")
    return 0


def cmd_defaults(args: argparse.Namespace, settings: Settings) -> int:
    try:
        config = get_default_config(settings)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    print(json.dumps(config.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="collector-sizing",
        description="Monitoring collector sizing calculator.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default from COLLECTOR_SIZING_LOG_LEVEL, else INFO).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_size = sub.add_parser("size", help="Size every site of an exported deployment JSON.")
    p_size.add_argument("input", help="Path to a deployment export JSON.")
    p_size.add_argument("--output", "-o", help="Write the full sizing result as JSON.")
    p_size.add_argument("--csv", help="Write one row per site as CSV.")
    p_size.add_argument("--collectors-csv", help="Write one row per collector as CSV.")
    p_size.add_argument("--max-load", type=float, help="Override the max load %% (1-100).")
    p_size.add_argument("--polling-failover", action="store_true", help="Add an N+1 polling collector.")
    p_size.add_argument("--logs-failover", action="store_true", help="Add an N+1 logs collector.")
    p_size.add_argument(
        "--use-file-capacities",
        action="store_true",
        help="Apply the collectorCapacities stored in the file instead of the configured ones.",
    )
    p_size.set_defaults(func=cmd_size)

    p_tpl = sub.add_parser("template", help="Write an empty deployment JSON to fill in.")
    p_tpl.add_argument("--output", "-o", default="deployment.json", help="Output path.")
    p_tpl.add_argument("--sites", type=int, default=1, help="Number of empty sites.")
    p_tpl.set_defaults(func=cmd_template)

    p_def = sub.add_parser("defaults", help="Print the effective default configuration.")
    p_def.set_defaults(func=cmd_defaults)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings()
    setup_logging(args.log_level or settings.log_level, settings.log_format)
    return args.func(args, settings)


if __name__ == "__main__":
    raise SystemExit(main())
