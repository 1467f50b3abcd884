#!/usr/bin/env python3
"""Tests for the dependency injection container."""

from unittest.mock import MagicMock

import pytest

from vnicbox.backends.guest_agent import QemuAgentConfigurator
from vnicbox.backends.libvirt_backend import LibvirtBackend
from vnicbox.di import DependencyContainer, create_default_container
from vnicbox.interfaces.guest import GuestConfigurator
from vnicbox.interfaces.hypervisor import HypervisorBackend
from vnicbox.pipeline import ProvisioningRun
from vnicbox.planner import PostBootConfigPlanner
from vnicbox.provisioner import InterfaceProvisioner


@pytest.fixture
def container(mock_backend, mock_configurator):
    container = DependencyContainer()
    container.register(HypervisorBackend, instance=mock_backend)
    container.register(GuestConfigurator, instance=mock_configurator)
    return container


class TestDependencyContainer:
    def test_resolve_instance(self, container, mock_backend):
        assert container.resolve(HypervisorBackend) is mock_backend

    def test_auto_wires_run(self, container, mock_backend, mock_configurator):
        run = container.resolve(ProvisioningRun)

        assert isinstance(run.provisioner, InterfaceProvisioner)
        assert run.provisioner.backend is mock_backend
        assert isinstance(run.planner, PostBootConfigPlanner)
        assert run.planner.configurator is mock_configurator

    def test_singleton_factory(self):
        factory = MagicMock(side_effect=lambda: object())
        container = DependencyContainer().register(HypervisorBackend, factory=factory)

        assert container.resolve(HypervisorBackend) is container.resolve(HypervisorBackend)
        factory.assert_called_once()

    def test_transient_factory(self):
        container = DependencyContainer().register(
            HypervisorBackend, factory=lambda: object(), singleton=False
        )
        assert container.resolve(HypervisorBackend) is not container.resolve(HypervisorBackend)

    def test_unregistered_abstract_type(self):
        with pytest.raises(KeyError):
            DependencyContainer().resolve(HypervisorBackend)

    def test_register_requires_target(self):
        with pytest.raises(ValueError):
            DependencyContainer().register(HypervisorBackend)


class TestDefaultContainer:
    def test_registrations(self):
        container = create_default_container(uri="qemu+ssh://host/system")

        assert container.has(HypervisorBackend)
        assert container.has(GuestConfigurator)
        backend = container.resolve(HypervisorBackend)
        assert isinstance(backend, LibvirtBackend)
        assert backend.uri == "qemu+ssh://host/system"
        assert isinstance(container.resolve(GuestConfigurator), QemuAgentConfigurator)

