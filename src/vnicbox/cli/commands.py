#!/usr/bin/env python3
"""
Commands for the vnicbox CLI.
"""

import json

from vnicbox.backends.guest_agent import wait_for_agent
from vnicbox.catalog import VirtualNetworkCatalog
from vnicbox.cli.utils import (
    build_container,
    console,
    load_config,
    networks_table,
    plan_table,
    slots_table,
)
from vnicbox.interfaces.hypervisor import HypervisorBackend
from vnicbox.pipeline import ProvisioningRun
from vnicbox.planner import PostBootConfigPlanner
from vnicbox.provisioner import InterfaceProvisioner


def cmd_networks(args):
    """List the virtual networks interfaces can be attached to."""
    backend = build_container(args).resolve(HypervisorBackend)
    try:
        catalog = VirtualNetworkCatalog(backend)
        if len(catalog) == 0:
            console.print("[dim]No virtual networks defined[/]")
            return
        console.print(networks_table(catalog))
    finally:
        backend.disconnect()


def cmd_plan(args):
    """Show slot assignment and guest plan without touching any domain."""
    config = load_config(args.config)

    if args.offline:
        backend = None
    else:
        backend = build_container(args, config).resolve(HypervisorBackend)

    try:
        provisioner = InterfaceProvisioner(backend, settings=config.settings)
        interfaces, _ = provisioner.prepare(config.networks, VirtualNetworkCatalog(backend))
    finally:
        if backend is not None:
            backend.disconnect()
    plan = PostBootConfigPlanner.plan(interfaces)

    if args.json:
        print(
            json.dumps(
                {
                    "slots": {
                        str(slot): {
                            "network_name": iface.network_name,
                            "ip": iface.ip,
                            "netmask": iface.netmask,
                        }
                        for slot, iface in interfaces.items()
                    },
                    "plan": [directive.to_dict() for directive in plan],
                },
                indent=2,
            )
        )
        return

    console.print(slots_table(interfaces))
    console.print(plan_table(plan))


def cmd_provision(args):
    """Attach interfaces, boot the domain, configure the guest."""
    config = load_config(args.config)
    container = build_container(args, config)
    container.register(
        InterfaceProvisioner,
        factory=lambda: InterfaceProvisioner(
            container.resolve(HypervisorBackend), settings=config.settings
        ),
    )
    backend = container.resolve(HypervisorBackend)
    run = container.resolve(ProvisioningRun)

    def boot():
        if args.start:
            console.print(f"[cyan]🚀 Starting domain {args.domain}...[/]")
            backend.start_domain(args.domain)
        console.print("[cyan]⏳ Waiting for guest agent...[/]")
        wait_for_agent(backend.lookup_domain(args.domain), timeout=args.agent_timeout)

    try:
        result = run.run(args.domain, config.networks, boot)
    finally:
        backend.disconnect()

    console.print(slots_table(result.provision.interfaces))
    console.print(plan_table(result.plan))
    console.print(
        f"[green]✅ {len(result.provision.attached)} interfaces attached to "
        f"'{result.provision.domain.name}'[/]"
    )
