"""
Error types raised by a vnicbox provisioning run.

None of these are retried or recovered from inside vnicbox; they surface
to the caller of the run unchanged.
"""

from typing import Any, Dict, List, Optional


class VnicboxError(Exception):
    """Base exception for all vnicbox errors."""

    def __init__(self, error_message: str):
        super().__init__(error_message)
        self.error_message = error_message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "error": type(self).__name__,
            "message": self.error_message,
        }


class ConfigError(VnicboxError):
    """The declarative configuration could not be read or validated."""


class NoDomainError(VnicboxError):
    """The domain to provision could not be located."""

    def __init__(self, error_message: str, domain_id: Optional[str] = None):
        super().__init__(f"No domain found: {error_message}")
        self.domain_id = domain_id


class SlotUnavailable(VnicboxError):
    """An interface slot is already taken, out of range, or none is left."""

    def __init__(self, slot: Optional[int] = None, reason: str = ""):
        if slot is None:
            message = reason or "No free interface slot available"
        else:
            message = f"Interface slot {slot} is not available"
            if reason:
                message += f": {reason}"
        super().__init__(message)
        self.slot = slot
        self.reason = reason

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["slot"] = self.slot
        return data


class AttachDeviceError(VnicboxError):
    """
    The hypervisor rejected an interface attachment.

    Attachment is not transactional: ``attached_slots`` lists the slots that
    were already attached to the domain when this slot failed. They are left
    in place.
    """

    def __init__(
        self,
        error_message: str,
        slot: Optional[int] = None,
        network_name: Optional[str] = None,
        attached_slots: Optional[List[int]] = None,
    ):
        super().__init__(f"Error while attaching new device to domain: {error_message}")
        self.slot = slot
        self.network_name = network_name
        self.attached_slots = list(attached_slots or [])


class GuestConfigurationError(VnicboxError):
    """The guest could not apply the network plan."""
