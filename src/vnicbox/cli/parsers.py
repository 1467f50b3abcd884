#!/usr/bin/env python3
"""
Argument parsers for the vnicbox CLI.
"""

import argparse
import json
import sys
from pathlib import Path

from rich.markup import escape

from vnicbox import __version__
from vnicbox.cli.commands import cmd_networks, cmd_plan, cmd_provision
from vnicbox.cli.utils import console
from vnicbox.errors import AttachDeviceError, VnicboxError
from vnicbox.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vnicbox",
        description="Provision libvirt VM network interfaces and configure them in the guest",
    )
    parser.add_argument("--version", action="version", version=f"vnicbox {__version__}")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")
    parser.add_argument("--log-file", type=Path, help="Also write JSON logs to this file")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    networks_parser = subparsers.add_parser("networks", help="List virtual networks")
    networks_parser.add_argument("--uri", help="libvirt connection URI")
    networks_parser.set_defaults(func=cmd_networks)

    plan_parser = subparsers.add_parser(
        "plan", help="Show slot assignment and guest plan without attaching anything"
    )
    plan_parser.add_argument("--config", "-c", help="Config file (default: ./.vnicbox.yaml)")
    plan_parser.add_argument("--uri", help="libvirt connection URI")
    plan_parser.add_argument(
        "--offline",
        action="store_true",
        help="Do not query libvirt; IP-based resolution falls back to the default network",
    )
    plan_parser.add_argument("--json", action="store_true", help="Print JSON instead of tables")
    plan_parser.set_defaults(func=cmd_plan)

    provision_parser = subparsers.add_parser(
        "provision", help="Attach interfaces, boot the domain and configure the guest"
    )
    provision_parser.add_argument("domain", help="Domain UUID")
    provision_parser.add_argument("--config", "-c", help="Config file (default: ./.vnicbox.yaml)")
    provision_parser.add_argument("--uri", help="libvirt connection URI")
    provision_parser.add_argument(
        "--no-start",
        dest="start",
        action="store_false",
        help="Do not start the domain; wait for it to be started elsewhere",
    )
    provision_parser.add_argument(
        "--agent-timeout",
        type=int,
        default=300,
        help="Seconds to wait for the guest agent after boot (default: 300)",
    )
    provision_parser.set_defaults(func=cmd_provision)

    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(2)

    configure_logging(level=args.log_level, json_output=args.json_logs, log_file=args.log_file)

    try:
        args.func(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/]")
        sys.exit(1)
    except AttachDeviceError as e:
        console.print(f"[red]Error: {escape(e.error_message)}[/]")
        if e.attached_slots:
            attached = ", ".join(f"eth{slot}" for slot in e.attached_slots)
            console.print(f"[yellow]⚠️  Already attached and left in place: {attached}[/]")
        sys.exit(1)
    except VnicboxError as e:
        if getattr(args, "json", False):
            print(json.dumps(e.to_dict(), indent=2))
        else:
            console.print(f"[red]Error: {escape(str(e))}[/]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/]")
        sys.exit(1)
