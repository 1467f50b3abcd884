#!/usr/bin/env python3
"""Tests for post-boot guest network planning."""

import pytest

from vnicbox.errors import GuestConfigurationError
from vnicbox.models import AddressingMode, ResolvedInterface
from vnicbox.planner import PostBootConfigPlanner


@pytest.fixture
def interfaces():
    return {
        0: ResolvedInterface(slot=0, network_name="default"),
        1: ResolvedInterface(slot=1, network_name="default", ip="10.0.0.5", netmask="255.255.255.0"),
        3: ResolvedInterface(slot=3, network_name="lan"),
        4: ResolvedInterface(slot=4, network_name="storage", ip="10.20.0.9", netmask="255.255.0.0"),
    }


class TestPlan:
    """Test PostBootConfigPlanner.plan."""

    def test_slot_zero_excluded(self, interfaces):
        plan = PostBootConfigPlanner.plan(interfaces)
        assert 0 not in [d.slot_index for d in plan]

    def test_ascending_slot_order(self, interfaces):
        shuffled = {k: interfaces[k] for k in (4, 0, 3, 1)}
        assert [d.slot_index for d in PostBootConfigPlanner.plan(shuffled)] == [1, 3, 4]

    def test_static_iff_ip(self, interfaces):
        plan = PostBootConfigPlanner.plan(interfaces)
        for directive in plan:
            expected = AddressingMode.STATIC if interfaces[directive.slot_index].ip else AddressingMode.DHCP
            assert directive.mode == expected

    def test_static_directive_carries_address(self, interfaces):
        directive = PostBootConfigPlanner.plan(interfaces)[0]
        assert directive.to_dict() == {
            "interface": 1,
            "type": "static",
            "ip": "10.0.0.5",
            "netmask": "255.255.255.0",
        }

    def test_dhcp_directive_has_no_address(self, interfaces):
        directive = PostBootConfigPlanner.plan(interfaces)[1]
        assert directive.mode == AddressingMode.DHCP
        assert directive.ip is None
        assert directive.netmask is None

    def test_only_provisioning_slot(self):
        plan = PostBootConfigPlanner.plan({0: ResolvedInterface(slot=0, network_name="default")})
        assert plan == []


class TestDeliver:
    """Test handing the plan to the guest configurator."""

    def test_single_batch(self, interfaces, mock_configurator, mock_domain):
        planner = PostBootConfigPlanner(mock_configurator)
        plan = planner.plan(interfaces)
        planner.deliver(mock_domain, plan)
        mock_configurator.apply_network_plan.assert_called_once_with(mock_domain, plan)

    def test_configurator_error_propagates(self, interfaces, mock_configurator, mock_domain):
        mock_configurator.apply_network_plan.side_effect = GuestConfigurationError("netplan failed")
        planner = PostBootConfigPlanner(mock_configurator)
        with pytest.raises(GuestConfigurationError, match="netplan failed"):
            planner.deliver(mock_domain, planner.plan(interfaces))
