"""Interfaces for applying network configuration inside a guest."""

from abc import ABC, abstractmethod

from vnicbox.interfaces.hypervisor import DomainHandle
from vnicbox.models import GuestNetworkPlan


class GuestConfigurator(ABC):
    """Abstract interface for guest network configuration."""

    @abstractmethod
    def apply_network_plan(self, domain: DomainHandle, plan: GuestNetworkPlan) -> None:
        """Apply the whole plan in one batch. Raises on failure."""
        pass
