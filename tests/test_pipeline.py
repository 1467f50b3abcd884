#!/usr/bin/env python3
"""Tests for a full staged provisioning run."""

from unittest.mock import MagicMock

import pytest

from vnicbox.errors import AttachDeviceError, NoDomainError, SlotUnavailable
from vnicbox.models import AddressingMode, NetworkDeclaration
from vnicbox.pipeline import ProvisioningRun
from vnicbox.planner import PostBootConfigPlanner
from vnicbox.provisioner import InterfaceProvisioner

DOMAIN_ID = "6f8c3b1e-2f4a-4c39-9d3e-0a1b2c3d4e5f"


@pytest.fixture
def run(mock_backend, mock_configurator):
    return ProvisioningRun(
        InterfaceProvisioner(mock_backend), PostBootConfigPlanner(mock_configurator)
    )


def private(**options):
    return NetworkDeclaration(type="private_network", options=options)


class TestProvisioningRun:
    """Test ProvisioningRun.run staging."""

    def test_scenario_static_ip_default_network(self, run, mock_configurator):
        boot = MagicMock()
        result = run.run(DOMAIN_ID, [private(ip="10.0.0.5", netmask="255.255.255.0")], boot)

        boot.assert_called_once_with()
        assert result.provision.interfaces[1].network_name == "default"
        assert [d.to_dict() for d in result.plan] == [
            {"interface": 1, "type": "static", "ip": "10.0.0.5", "netmask": "255.255.255.0"}
        ]
        mock_configurator.apply_network_plan.assert_called_once()

    def test_stages_run_in_order(self, mock_backend, mock_domain, mock_configurator):
        calls = MagicMock()
        calls.attach_mock(mock_domain.attach_device, "attach_device")
        calls.attach_mock(mock_configurator.apply_network_plan, "apply_network_plan")
        boot = calls.boot

        run = ProvisioningRun(
            InterfaceProvisioner(mock_backend), PostBootConfigPlanner(mock_configurator)
        )
        run.run(DOMAIN_ID, [private(network_name="lan")], boot)

        names = [c[0] for c in calls.mock_calls]
        assert names == ["attach_device", "attach_device", "boot", "apply_network_plan"]

    def test_dhcp_for_interfaces_without_ip(self, run):
        result = run.run(DOMAIN_ID, [private(network_name="lan")], MagicMock())
        assert [(d.slot_index, d.mode) for d in result.plan] == [(1, AddressingMode.DHCP)]

    def test_slot_conflict_skips_boot(self, run, mock_domain, mock_configurator):
        boot = MagicMock()
        with pytest.raises(SlotUnavailable):
            run.run(DOMAIN_ID, [private(adapter=3), private(adapter=3)], boot)
        boot.assert_not_called()
        mock_domain.attach_device.assert_not_called()
        mock_configurator.apply_network_plan.assert_not_called()

    def test_missing_domain_skips_boot(self, run, mock_backend):
        mock_backend.lookup_domain.side_effect = RuntimeError("no domain")
        boot = MagicMock()
        with pytest.raises(NoDomainError):
            run.run(DOMAIN_ID, [], boot)
        boot.assert_not_called()

    def test_attach_failure_skips_boot(self, run, mock_domain):
        mock_domain.attach_device.side_effect = [None, RuntimeError("boom")]
        boot = MagicMock()
        with pytest.raises(AttachDeviceError):
            run.run(DOMAIN_ID, [private(network_name="lan")], boot)
        boot.assert_not_called()

    def test_boot_failure_skips_guest_configuration(self, run, mock_configurator):
        boot = MagicMock(side_effect=RuntimeError("domain failed to start"))
        with pytest.raises(RuntimeError, match="domain failed to start"):
            run.run(DOMAIN_ID, [private(network_name="lan")], boot)
        mock_configurator.apply_network_plan.assert_not_called()
