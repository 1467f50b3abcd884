#!/usr/bin/env python3
"""
Shared utilities for the vnicbox CLI.
"""

from pathlib import Path
from typing import Dict, Optional

from rich.console import Console
from rich.table import Table

from vnicbox.catalog import VirtualNetworkCatalog
from vnicbox.di import DependencyContainer, create_default_container
from vnicbox.models import VNICBOX_CONFIG_FILE, GuestNetworkPlan, ProvisionConfig, ResolvedInterface

console = Console()


def load_config(path: Optional[str]) -> ProvisionConfig:
    """Load the config file given on the command line, or ./.vnicbox.yaml."""
    config_path = Path(path).expanduser() if path else Path.cwd() / VNICBOX_CONFIG_FILE
    return ProvisionConfig.load(config_path)


def build_container(args, config: Optional[ProvisionConfig] = None) -> DependencyContainer:
    """Container for this invocation; ``--uri`` beats the config file's ``uri``."""
    uri = getattr(args, "uri", None) or (config.uri if config else None)
    return create_default_container(uri=uri)


def networks_table(catalog: VirtualNetworkCatalog) -> Table:
    table = Table(title="Virtual networks")
    table.add_column("Name", style="cyan")
    table.add_column("Network", style="green")
    table.add_column("Netmask", style="yellow")
    table.add_column("Active", style="blue")

    for network in catalog:
        table.add_row(
            network.name,
            network.address or "-",
            network.netmask or "-",
            "yes" if network.active else "no",
        )
    return table


def slots_table(interfaces: Dict[int, ResolvedInterface]) -> Table:
    table = Table(title="Interface slots")
    table.add_column("Slot", style="cyan", justify="right")
    table.add_column("Device", style="magenta")
    table.add_column("Network", style="green")
    table.add_column("IP", style="yellow")
    table.add_column("Netmask", style="yellow")

    for slot, iface in interfaces.items():
        table.add_row(
            str(slot),
            f"eth{slot}",
            iface.network_name,
            iface.ip or "dhcp",
            iface.netmask if iface.ip else "",
        )
    return table


def plan_table(plan: GuestNetworkPlan) -> Table:
    table = Table(title="Guest network plan")
    table.add_column("Interface", style="cyan")
    table.add_column("Mode", style="green")
    table.add_column("IP", style="yellow")
    table.add_column("Netmask", style="yellow")

    for directive in plan:
        table.add_row(
            f"eth{directive.slot_index}",
            directive.mode.value,
            directive.ip or "",
            directive.netmask or "",
        )
    return table
