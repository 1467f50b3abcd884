"""
Pytest fixtures and configuration for vnicbox tests.
"""
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from vnicbox.interfaces.guest import GuestConfigurator
from vnicbox.interfaces.hypervisor import DomainHandle, HypervisorBackend, VirtualNetworkInfo


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_networks():
    """Networks as the libvirt backend would report them."""
    return [
        VirtualNetworkInfo(name="default", address="192.168.122.0", netmask="255.255.255.0"),
        VirtualNetworkInfo(name="lab", address="192.168.10.0", netmask="255.255.255.0"),
        VirtualNetworkInfo(name="storage", address="10.20.0.0", netmask="255.255.0.0"),
        VirtualNetworkInfo(name="bridged", address=None, netmask=None, active=False),
    ]


@pytest.fixture
def mock_domain():
    domain = MagicMock(spec=DomainHandle)
    domain.name = "test-vm"
    domain.uuid = "6f8c3b1e-2f4a-4c39-9d3e-0a1b2c3d4e5f"
    domain.is_active.return_value = False
    return domain


@pytest.fixture
def mock_backend(mock_domain, sample_networks):
    backend = MagicMock(spec=HypervisorBackend)
    backend.lookup_domain.return_value = mock_domain
    backend.list_networks.return_value = sample_networks
    return backend


@pytest.fixture
def mock_configurator():
    return MagicMock(spec=GuestConfigurator)
