#!/usr/bin/env python3
"""
Pydantic models for vnicbox configuration validation, plus the plain data
passed between the allocator, resolver, provisioner and planner.
"""

import ipaddress
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from vnicbox.errors import ConfigError

# Highest usable interface slot index. Slots run 0..MAX_SLOTS inclusive.
MAX_SLOTS = 8
DEFAULT_NETMASK = "255.255.255.0"
# Network bound to slot 0, used for ssh and provisioning.
PROVISIONING_NETWORK = "default"
# Returned by the resolver when nothing else matches.
FALLBACK_NETWORK = "default"
PRIVATE_NETWORK = "private_network"
PROVIDER_SCOPE = "libvirt"
VNICBOX_CONFIG_FILE = ".vnicbox.yaml"


def scoped_options(options: Dict[str, Any], scope: str = PROVIDER_SCOPE) -> Dict[str, Any]:
    """
    Merge provider-scoped keys over their short form.

    ``{"network_name": "a", "libvirt__network_name": "b"}`` becomes
    ``{"network_name": "b"}``. Keys scoped to other providers are dropped.
    """
    prefix = f"{scope}__"
    merged: Dict[str, Any] = {}
    scoped: Dict[str, Any] = {}
    for key, value in options.items():
        key = str(key)
        if key.startswith(prefix):
            scoped[key[len(prefix):]] = value
        elif "__" not in key:
            merged[key] = value
    merged.update(scoped)
    return merged


def normalize_netmask(value: str) -> str:
    """Return the dotted-quad form of a netmask given as mask or prefix length."""
    try:
        return str(ipaddress.IPv4Network(f"0.0.0.0/{value}").netmask)
    except ValueError:
        raise ValueError(f"Invalid netmask: {value}")


class AddressingMode(Enum):
    """How the guest configures an interface."""

    STATIC = "static"
    DHCP = "dhcp"


class InterfaceRequest(BaseModel):
    """One private network attachment, as declared by the user."""

    model_config = ConfigDict(frozen=True)

    adapter: Optional[int] = Field(default=None, description="Explicit slot index")
    network_name: Optional[str] = Field(default=None, description="Explicit network to attach to")
    ip: Optional[str] = Field(default=None, description="Static IPv4 address")
    netmask: str = Field(default=DEFAULT_NETMASK, description="IPv4 netmask")

    @field_validator("network_name", "ip", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("ip")
    @classmethod
    def ip_must_be_ipv4(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        try:
            return str(ipaddress.IPv4Address(v))
        except ValueError:
            raise ValueError(f"Invalid IPv4 address: {v}")

    @field_validator("netmask", mode="before")
    @classmethod
    def netmask_must_be_valid(cls, v: Any) -> str:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_NETMASK
        return normalize_netmask(str(v).strip())


class NetworkDeclaration(BaseModel):
    """A network entry from the config file: a type tag and its options."""

    type: str = Field(default=PRIVATE_NETWORK, description="Network type")
    options: Dict[str, Any] = Field(default_factory=dict, description="Network options")

    @model_validator(mode="before")
    @classmethod
    def handle_flat_options(cls, data: Any) -> Any:
        """Accept both ``{type, options: {...}}`` and ``{type, ip, ...}``."""
        if isinstance(data, dict) and "options" not in data:
            options = {k: v for k, v in data.items() if k != "type"}
            data = {k: v for k, v in data.items() if k == "type"}
            data["options"] = options
        return data

    @model_validator(mode="after")
    def options_must_form_request(self) -> "NetworkDeclaration":
        """Private network options are checked on load, not at attach time."""
        if self.is_private:
            try:
                InterfaceRequest.model_validate(scoped_options(self.options))
            except ValidationError as e:
                problems = "; ".join(
                    f"{'.'.join(str(p) for p in err['loc']) or 'options'}: {err['msg']}"
                    for err in e.errors()
                )
                raise ValueError(f"Invalid private_network options: {problems}")
        return self

    @property
    def is_private(self) -> bool:
        return self.type == PRIVATE_NETWORK

    def to_request(self, default_netmask: str = DEFAULT_NETMASK) -> InterfaceRequest:
        """Build the immutable request, filling in the default netmask."""
        options = {"netmask": default_netmask}
        options.update(scoped_options(self.options))
        try:
            return InterfaceRequest.model_validate(options)
        except ValidationError as e:
            raise ConfigError(f"Invalid network options {self.options}: {e}")


class ProvisionSettings(BaseModel):
    """Allocator and resolver defaults."""

    max_slots: int = Field(default=MAX_SLOTS, ge=1, le=31, description="Highest slot index")
    default_netmask: str = Field(default=DEFAULT_NETMASK, description="Netmask if none given")
    provisioning_network: str = Field(
        default=PROVISIONING_NETWORK, description="Network bound to slot 0"
    )
    fallback_network: str = Field(
        default=FALLBACK_NETWORK, description="Network used when resolution finds nothing"
    )

    @field_validator("provisioning_network", "fallback_network")
    @classmethod
    def name_must_be_valid(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Network name cannot be empty")
        return v.strip()

    @field_validator("default_netmask")
    @classmethod
    def default_netmask_must_be_valid(cls, v: str) -> str:
        return normalize_netmask(v)


class ProvisionConfig(BaseModel):
    """Complete vnicbox configuration with validation."""

    version: str = Field(default="1", description="Config version")
    uri: Optional[str] = Field(default=None, description="libvirt connection URI")
    settings: ProvisionSettings = Field(default_factory=ProvisionSettings)
    networks: List[NetworkDeclaration] = Field(default_factory=list)

    @classmethod
    def load(cls, path: Path) -> "ProvisionConfig":
        """Load configuration from YAML file."""
        import yaml

        if path.is_dir():
            path = path / VNICBOX_CONFIG_FILE
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        try:
            data = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to read config file {path}: {e}")
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Config file must be a YAML mapping")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(str(e))


# Slot index -> request occupying it. Slot 0 is always present.
SlotTable = Dict[int, InterfaceRequest]


@dataclass(frozen=True)
class ResolvedInterface:
    """A slot occupant after its network has been resolved."""

    slot: int
    network_name: str
    ip: Optional[str] = None
    netmask: str = DEFAULT_NETMASK

    def __post_init__(self):
        if not self.network_name:
            raise ValueError(f"Slot {self.slot} resolved to an empty network name")

    @property
    def is_static(self) -> bool:
        return bool(self.ip)


@dataclass(frozen=True)
class DeviceDescriptor:
    """An interface device to hand to the hypervisor's attach call."""

    slot: int
    network_name: str
    model: str = "virtio"

    def to_xml(self) -> str:
        from vnicbox.device_xml import generate_interface_xml

        return generate_interface_xml(self.slot, self.network_name, model=self.model)


@dataclass
class NetworkDirective:
    """Guest-side configuration for one interface."""

    slot_index: int
    mode: AddressingMode
    ip: Optional[str] = None
    netmask: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"interface": self.slot_index, "type": self.mode.value}
        if self.mode == AddressingMode.STATIC:
            data["ip"] = self.ip
            data["netmask"] = self.netmask
        return data


GuestNetworkPlan = List[NetworkDirective]
