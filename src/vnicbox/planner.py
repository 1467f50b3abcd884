#!/usr/bin/env python3
"""
Post-boot guest network configuration.
"""

from typing import Dict

import structlog

from vnicbox.interfaces.guest import GuestConfigurator
from vnicbox.interfaces.hypervisor import DomainHandle
from vnicbox.models import AddressingMode, GuestNetworkPlan, NetworkDirective, ResolvedInterface

log = structlog.get_logger(__name__)


class PostBootConfigPlanner:
    """Turn the finalized slot table into guest-side configuration."""

    def __init__(self, configurator: GuestConfigurator):
        self.configurator = configurator

    @staticmethod
    def plan(interfaces: Dict[int, ResolvedInterface]) -> GuestNetworkPlan:
        # Slot 0 carries the provisioning session; taking it down in the
        # guest would cut the connection we are provisioning over.
        plan: GuestNetworkPlan = []
        for slot in sorted(interfaces):
            if slot == 0:
                continue
            iface = interfaces[slot]
            if iface.is_static:
                plan.append(
                    NetworkDirective(
                        slot_index=slot,
                        mode=AddressingMode.STATIC,
                        ip=iface.ip,
                        netmask=iface.netmask,
                    )
                )
            else:
                plan.append(NetworkDirective(slot_index=slot, mode=AddressingMode.DHCP))
        return plan

    def deliver(self, domain: DomainHandle, plan: GuestNetworkPlan) -> None:
        log.info("Configuring and enabling network interfaces...", interfaces=len(plan))
        self.configurator.apply_network_plan(domain, plan)
