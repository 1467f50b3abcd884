#!/usr/bin/env python3
"""
Pre-boot interface provisioning.

Allocation and resolution are pure; the only side effects here are the
domain lookup and the attach calls, which run strictly in ascending slot
order and are not rolled back on failure.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

import structlog

from vnicbox.allocator import SlotAllocator, private_requests
from vnicbox.catalog import VirtualNetworkCatalog
from vnicbox.errors import AttachDeviceError, NoDomainError
from vnicbox.interfaces.hypervisor import DomainHandle, HypervisorBackend
from vnicbox.models import (
    DeviceDescriptor,
    NetworkDeclaration,
    ProvisionSettings,
    ResolvedInterface,
)
from vnicbox.resolver import NetworkResolver

log = structlog.get_logger(__name__)


@dataclass
class ProvisionResult:
    """Outcome of a successful pre-boot provisioning pass."""

    domain: DomainHandle
    interfaces: Dict[int, ResolvedInterface]
    descriptors: List[DeviceDescriptor]
    attached: List[int] = field(default_factory=list)


class InterfaceProvisioner:
    """Attach one network interface per slot to a domain before it boots."""

    def __init__(
        self,
        backend: HypervisorBackend,
        settings: Optional[ProvisionSettings] = None,
    ):
        self.backend = backend
        self.settings = settings or ProvisionSettings()
        self.allocator = SlotAllocator(
            max_slots=self.settings.max_slots,
            provisioning_network=self.settings.provisioning_network,
        )
        self.resolver = NetworkResolver(fallback_network=self.settings.fallback_network)

    def lookup(self, domain_id: str) -> DomainHandle:
        try:
            return self.backend.lookup_domain(domain_id)
        except Exception as e:
            raise NoDomainError(str(e), domain_id=domain_id) from e

    def prepare(
        self,
        declarations: Iterable[NetworkDeclaration],
        catalog: VirtualNetworkCatalog,
    ) -> Tuple[Dict[int, ResolvedInterface], List[DeviceDescriptor]]:
        """Allocate and resolve without touching the domain.

        Returns the resolved slot table and one descriptor per slot, both in
        ascending slot order.
        """
        requests = private_requests(declarations, self.settings.default_netmask)
        slots = self.allocator.allocate(requests)

        interfaces: Dict[int, ResolvedInterface] = {}
        for slot, request in slots.items():
            interfaces[slot] = ResolvedInterface(
                slot=slot,
                network_name=self.resolver.resolve(request, catalog),
                ip=request.ip,
                netmask=request.netmask,
            )

        descriptors = [
            DeviceDescriptor(slot=slot, network_name=iface.network_name)
            for slot, iface in interfaces.items()
        ]
        return interfaces, descriptors

    def attach(self, domain: DomainHandle, descriptors: List[DeviceDescriptor]) -> List[int]:
        """Attach descriptors in order, stopping at the first failure."""
        attached: List[int] = []
        for descriptor in descriptors:
            log.info(
                f"Creating network interface eth{descriptor.slot} "
                f"connected to network {descriptor.network_name}.",
                slot=descriptor.slot,
                network=descriptor.network_name,
            )
            try:
                domain.attach_device(descriptor.to_xml())
            except Exception as e:
                raise AttachDeviceError(
                    str(e),
                    slot=descriptor.slot,
                    network_name=descriptor.network_name,
                    attached_slots=attached,
                ) from e
            attached.append(descriptor.slot)
        return attached

    def provision(
        self,
        domain_id: str,
        declarations: Iterable[NetworkDeclaration],
    ) -> ProvisionResult:
        """
        Look up the domain, allocate slots, resolve networks and attach.

        Raises:
            NoDomainError: The domain lookup failed; nothing was allocated.
            SlotUnavailable: Allocation failed; nothing was attached.
            AttachDeviceError: An attach failed; earlier slots stay attached.
        """
        domain = self.lookup(domain_id)
        catalog = VirtualNetworkCatalog(self.backend)
        interfaces, descriptors = self.prepare(declarations, catalog)
        attached = self.attach(domain, descriptors)
        return ProvisionResult(
            domain=domain,
            interfaces=interfaces,
            descriptors=descriptors,
            attached=attached,
        )
