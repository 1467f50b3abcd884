"""Read-only view of the virtual networks defined on the hypervisor."""

from typing import Iterator, List, Optional

import structlog

from vnicbox.interfaces.hypervisor import HypervisorBackend, VirtualNetworkInfo

log = structlog.get_logger(__name__)


class VirtualNetworkCatalog:
    """
    Snapshot of the hypervisor's virtual networks for one provisioning run.

    The backend is queried on first use and never again, so every request
    in a run is resolved against the same list. Build a new catalog for each
    run.
    """

    def __init__(self, backend: Optional[HypervisorBackend] = None):
        self._backend = backend
        self._networks: Optional[List[VirtualNetworkInfo]] = None

    @property
    def networks(self) -> List[VirtualNetworkInfo]:
        if self._networks is None:
            if self._backend is None:
                self._networks = []
            else:
                self._networks = list(self._backend.list_networks())
                log.debug("catalog.loaded", count=len(self._networks))
        return self._networks

    def __iter__(self) -> Iterator[VirtualNetworkInfo]:
        return iter(self.networks)

    def __len__(self) -> int:
        return len(self.networks)

