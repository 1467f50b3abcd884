"""libvirt hypervisor backend implementation."""

import os
import xml.etree.ElementTree as ET
from typing import List, Optional

import structlog

try:
    import libvirt
    import libvirt_qemu
except ImportError:
    libvirt = None
    libvirt_qemu = None

from ..interfaces.hypervisor import DomainHandle, HypervisorBackend, VirtualNetworkInfo
from ..models import normalize_netmask
from ..resolver import network_address

log = structlog.get_logger(__name__)

DEFAULT_URI = "qemu:///system"


def default_uri() -> str:
    """Connection URI from ``VNICBOX_LIBVIRT_URI``, else the system session."""
    return os.getenv("VNICBOX_LIBVIRT_URI", DEFAULT_URI)


def parse_network_xml(xml: str) -> VirtualNetworkInfo:
    """Read name, network address and netmask from libvirt network XML.

    Only the first IPv4 ``<ip>`` block is used. Networks without one (e.g.
    pure bridges) get ``address=None`` and never match an IP.
    """
    root = ET.fromstring(xml)
    name = root.findtext("name", default="")

    for ip in root.findall("ip"):
        if ip.get("family", "ipv4") != "ipv4" or not ip.get("address"):
            continue
        netmask = ip.get("netmask")
        if netmask is None and ip.get("prefix"):
            netmask = normalize_netmask(ip.get("prefix"))
        if netmask is None:
            continue
        return VirtualNetworkInfo(
            name=name,
            address=network_address(ip.get("address"), netmask),
            netmask=netmask,
        )

    return VirtualNetworkInfo(name=name, address=None, netmask=None)


class LibvirtDomain(DomainHandle):
    """A libvirt ``virDomain`` behind the DomainHandle interface."""

    def __init__(self, domain):
        self._domain = domain

    @property
    def name(self) -> str:
        return self._domain.name()

    @property
    def uuid(self) -> str:
        return self._domain.UUIDString()

    def is_active(self) -> bool:
        return self._domain.isActive() == 1

    def attach_device(self, xml: str) -> None:
        """Attach to the persistent config, and to the live domain if running."""
        flags = libvirt.VIR_DOMAIN_AFFECT_CONFIG
        if self.is_active():
            flags |= libvirt.VIR_DOMAIN_AFFECT_LIVE
        self._domain.attachDeviceFlags(xml, flags)

    def agent_command(self, payload: str, timeout: int = 30) -> str:
        return libvirt_qemu.qemuAgentCommand(self._domain, payload, timeout, 0)


class LibvirtBackend(HypervisorBackend):
    """libvirt hypervisor backend."""

    name = "libvirt"

    def __init__(self, uri: Optional[str] = None):
        self.uri = uri or default_uri()
        self._conn = None

    def connect(self) -> None:
        """Establish connection to libvirt."""
        if libvirt is None:
            raise RuntimeError("libvirt-python not installed")

        if self._conn is not None:
            try:
                if self._conn.isAlive():
                    return
            except libvirt.libvirtError:
                pass  # stale connection, reopen below

        try:
            self._conn = libvirt.open(self.uri)
        except libvirt.libvirtError as e:
            raise ConnectionError(f"Failed to connect to libvirt at {self.uri}: {e}")
        log.debug("libvirt.connected", uri=self.uri)

    def disconnect(self) -> None:
        """Close connection."""
        if self._conn:
            try:
                self._conn.close()
            except libvirt.libvirtError as e:
                log.warning("libvirt.close_failed", error=str(e))
            self._conn = None

    @property
    def conn(self):
        """Get active libvirt connection."""
        if self._conn is None:
            self.connect()
        return self._conn

    def lookup_domain(self, domain_id: str) -> LibvirtDomain:
        return LibvirtDomain(self.conn.lookupByUUIDString(domain_id))

    def list_networks(self) -> List[VirtualNetworkInfo]:
        """List all (active and inactive) libvirt networks."""
        networks = []
        for network in self.conn.listAllNetworks():
            info = parse_network_xml(network.XMLDesc(0))
            networks.append(
                VirtualNetworkInfo(
                    name=info.name,
                    address=info.address,
                    netmask=info.netmask,
                    active=network.isActive() == 1,
                )
            )
        return networks

    def start_domain(self, domain_id: str) -> None:
        domain = self.conn.lookupByUUIDString(domain_id)
        if not domain.isActive():
            domain.create()
