"""Interfaces for vnicbox hypervisor backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class VirtualNetworkInfo:
    """Virtual network information returned by hypervisor."""

    name: str
    address: Optional[str]  # network address (ip AND netmask)
    netmask: Optional[str]
    active: bool = True


class DomainHandle(ABC):
    """A domain looked up on the hypervisor."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Domain name."""
        pass

    @property
    @abstractmethod
    def uuid(self) -> str:
        """Domain UUID string."""
        pass

    @abstractmethod
    def is_active(self) -> bool:
        """Check if domain is running."""
        pass

    @abstractmethod
    def attach_device(self, xml: str) -> None:
        """Attach a device described by XML."""
        pass

    @abstractmethod
    def agent_command(self, payload: str, timeout: int = 30) -> str:
        """Send a raw QEMU guest agent command, return the raw reply."""
        pass


class HypervisorBackend(ABC):
    """Abstract interface for hypervisor operations."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend name (e.g., 'libvirt')."""
        pass

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to hypervisor."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close connection."""
        pass

    @abstractmethod
    def lookup_domain(self, domain_id: str) -> DomainHandle:
        """Look up a domain by UUID. Raises on failure."""
        pass

    @abstractmethod
    def list_networks(self) -> List[VirtualNetworkInfo]:
        """List all virtual networks, active and inactive."""
        pass

    @abstractmethod
    def start_domain(self, domain_id: str) -> None:
        """Start a domain."""
        pass
