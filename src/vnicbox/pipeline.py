#!/usr/bin/env python3
"""
A full provisioning run: attach interfaces, boot, configure the guest.
"""

from dataclasses import dataclass
from typing import Callable, Iterable

import structlog

from vnicbox.logging import log_operation, run_context
from vnicbox.models import GuestNetworkPlan, NetworkDeclaration
from vnicbox.planner import PostBootConfigPlanner
from vnicbox.provisioner import InterfaceProvisioner, ProvisionResult

log = structlog.get_logger(__name__)


@dataclass
class RunResult:
    provision: ProvisionResult
    plan: GuestNetworkPlan


class ProvisioningRun:
    """
    Stage the run around a blocking boot step.

    ``boot`` is called exactly once, after every interface is attached and
    before the guest plan is built. When it returns the domain is expected
    to be running with its guest agent reachable. If provisioning fails,
    ``boot`` is never called. Runs against the same domain must not overlap.
    """

    def __init__(self, provisioner: InterfaceProvisioner, planner: PostBootConfigPlanner):
        self.provisioner = provisioner
        self.planner = planner

    def run(
        self,
        domain_id: str,
        declarations: Iterable[NetworkDeclaration],
        boot: Callable[[], None],
    ) -> RunResult:
        with run_context(domain_id):
            with log_operation(log, "provision_interfaces"):
                result = self.provisioner.provision(domain_id, declarations)

            with log_operation(log, "boot"):
                boot()

            with log_operation(log, "configure_guest_networks"):
                plan = self.planner.plan(result.interfaces)
                self.planner.deliver(result.domain, plan)

        return RunResult(provision=result, plan=plan)
