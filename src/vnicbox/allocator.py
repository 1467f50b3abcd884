#!/usr/bin/env python3
"""
Interface slot allocation.

Slot 0 always belongs to the provisioning network. Every private network
request then gets either the slot it asked for or the lowest free one.
"""

from typing import Iterable, List, Optional, Sequence

import structlog

from vnicbox.errors import SlotUnavailable
from vnicbox.models import (
    DEFAULT_NETMASK,
    MAX_SLOTS,
    PROVISIONING_NETWORK,
    InterfaceRequest,
    NetworkDeclaration,
    SlotTable,
)

log = structlog.get_logger(__name__)


def private_requests(
    declarations: Iterable[NetworkDeclaration],
    default_netmask: str = DEFAULT_NETMASK,
) -> List[InterfaceRequest]:
    """Keep private networks only, in declaration order.

    Public networks and port forwarding cannot be expressed through the
    libvirt API, so they are skipped rather than rejected.
    """
    requests = []
    for declaration in declarations:
        if not declaration.is_private:
            log.debug("network.skipped", type=declaration.type)
            continue
        requests.append(declaration.to_request(default_netmask))
    return requests


class SlotAllocator:
    """Assign interface requests to numbered slots 0..max_slots."""

    def __init__(
        self,
        max_slots: int = MAX_SLOTS,
        provisioning_network: str = PROVISIONING_NETWORK,
    ):
        self.max_slots = max_slots
        self.provisioning_network = provisioning_network

    def allocate(self, requests: Sequence[InterfaceRequest]) -> SlotTable:
        """
        Place every request in a slot, in the order given.

        Raises:
            SlotUnavailable: An explicit slot is taken or out of range, or
                no free slot is left.
        """
        slots: SlotTable = {0: InterfaceRequest(network_name=self.provisioning_network)}

        for request in requests:
            if request.adapter is not None:
                slot = request.adapter
                if slot in slots:
                    raise SlotUnavailable(slot, "already in use")
                if not 0 <= slot <= self.max_slots:
                    raise SlotUnavailable(slot, f"must be between 1 and {self.max_slots}")
            else:
                slot = self.find_empty(slots, start=1)
                if slot is None:
                    raise SlotUnavailable(
                        reason=f"All {self.max_slots} interface slots are in use"
                    )
            slots[slot] = request

        return dict(sorted(slots.items()))

    def find_empty(self, slots: SlotTable, start: int = 0) -> Optional[int]:
        """Lowest unoccupied index in ``start..max_slots``, or None."""
        for index in range(start, self.max_slots + 1):
            if index not in slots:
                return index
        return None
