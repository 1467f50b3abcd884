"""
vnicbox - attach network interfaces to a libvirt VM before it boots, then
configure them in the guest once it is up.
"""

__version__ = "0.1.0"
__author__ = "vnicbox Team"

from vnicbox.allocator import SlotAllocator
from vnicbox.errors import AttachDeviceError, NoDomainError, SlotUnavailable
from vnicbox.pipeline import ProvisioningRun
from vnicbox.planner import PostBootConfigPlanner
from vnicbox.provisioner import InterfaceProvisioner
from vnicbox.resolver import NetworkResolver

__all__ = [
    "AttachDeviceError",
    "InterfaceProvisioner",
    "NetworkResolver",
    "NoDomainError",
    "PostBootConfigPlanner",
    "ProvisioningRun",
    "SlotAllocator",
    "SlotUnavailable",
    "__version__",
]
