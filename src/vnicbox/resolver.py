#!/usr/bin/env python3
"""
Network resolution: which existing virtual network a request attaches to.
"""

import ipaddress
from typing import Iterable

import structlog

from vnicbox.interfaces.hypervisor import VirtualNetworkInfo
from vnicbox.models import DEFAULT_NETMASK, FALLBACK_NETWORK, InterfaceRequest

log = structlog.get_logger(__name__)


def network_address(ip: str, netmask: str = DEFAULT_NETMASK) -> str:
    """Return ``ip AND netmask`` as a dotted-quad string.

    >>> network_address("192.168.10.5", "255.255.255.0")
    '192.168.10.0'
    """
    address = int(ipaddress.IPv4Address(ip)) & int(ipaddress.IPv4Address(netmask))
    return str(ipaddress.IPv4Address(address))


class NetworkResolver:
    """Pick a network name for an interface request.

    Resolution never fails. An explicit network name wins and is not
    checked against the catalog, so a name that does not exist surfaces as
    an attach error later. Otherwise a static IP is matched against the
    network address of each catalog entry, and anything left over goes to
    the fallback network.
    """

    def __init__(self, fallback_network: str = FALLBACK_NETWORK):
        self.fallback_network = fallback_network

    def resolve(self, request: InterfaceRequest, catalog: Iterable[VirtualNetworkInfo]) -> str:
        if request.network_name:
            return request.network_name

        if request.ip:
            address = network_address(request.ip, request.netmask)
            for network in catalog:
                if network.address == address:
                    log.debug("network.matched", ip=request.ip, network=network.name)
                    return network.name
            log.debug("network.unmatched", ip=request.ip, address=address)

        return self.fallback_network
