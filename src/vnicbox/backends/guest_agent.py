"""Guest network configuration through the QEMU guest agent."""

import base64
import ipaddress
import json
import time
from typing import Optional, Tuple

import structlog
import yaml

from ..errors import GuestConfigurationError
from ..interfaces.guest import GuestConfigurator
from ..interfaces.hypervisor import DomainHandle
from ..models import AddressingMode, GuestNetworkPlan

log = structlog.get_logger(__name__)

NETPLAN_PATH = "/etc/netplan/60-vnicbox.yaml"


def render_netplan(plan: GuestNetworkPlan) -> str:
    """Render the plan as a netplan v2 document, one ``eth<slot>`` per entry.

    Entries are keyed by interface name with no ``match:`` stanza, so slot N
    is only configured if the guest names that NIC ``ethN``. Guests using
    predictable names (``enp1s0`` and so on) must boot with
    ``net.ifnames=0``; otherwise ``netplan apply`` succeeds and configures
    nothing.
    """
    ethernets = {}
    for directive in plan:
        if directive.mode == AddressingMode.STATIC:
            prefix = ipaddress.IPv4Network(f"0.0.0.0/{directive.netmask}").prefixlen
            ethernets[f"eth{directive.slot_index}"] = {
                "dhcp4": False,
                "addresses": [f"{directive.ip}/{prefix}"],
            }
        else:
            ethernets[f"eth{directive.slot_index}"] = {"dhcp4": True}

    network_config = {"network": {"version": 2, "ethernets": ethernets}}
    return yaml.dump(network_config, default_flow_style=False, sort_keys=False)


def wait_for_agent(domain: DomainHandle, timeout: float = 300, interval: float = 2.0) -> None:
    """Block until the guest agent answers ``guest-ping``."""
    deadline = time.time() + timeout
    ping = json.dumps({"execute": "guest-ping"})
    while True:
        try:
            domain.agent_command(ping, timeout=5)
            return
        except Exception as e:
            if time.time() >= deadline:
                raise GuestConfigurationError(
                    f"Guest agent in '{domain.name}' not reachable after {timeout}s: {e}"
                ) from e
        time.sleep(interval)


class QemuAgentConfigurator(GuestConfigurator):
    """Write a netplan file in the guest and apply it, in one batch."""

    def __init__(self, timeout: int = 60, poll_interval: float = 0.5):
        self.timeout = timeout
        self.poll_interval = poll_interval

    def apply_network_plan(self, domain: DomainHandle, plan: GuestNetworkPlan) -> None:
        if not plan:
            log.info("guest.plan_empty", domain=domain.name)
            return

        document = render_netplan(plan)
        script = (
            f"cat > {NETPLAN_PATH} <<'VNICBOX_EOF'\n{document}VNICBOX_EOF\n"
            f"chmod 600 {NETPLAN_PATH} && netplan apply"
        )
        exit_code, _, stderr = self.execute(domain, script)
        if exit_code != 0:
            raise GuestConfigurationError(
                f"netplan apply failed in '{domain.name}' (exit {exit_code}): {stderr.strip()}"
            )
        log.info("guest.networks_configured", domain=domain.name, interfaces=len(plan))

    def execute(self, domain: DomainHandle, command: str) -> Tuple[Optional[int], str, str]:
        """Run a shell command in the guest via ``guest-exec`` and wait for it."""
        exec_cmd = {
            "execute": "guest-exec",
            "arguments": {
                "path": "/bin/sh",
                "arg": ["-c", command],
                "capture-output": True,
            },
        }

        try:
            reply = json.loads(domain.agent_command(json.dumps(exec_cmd), self.timeout))
            pid = reply["return"]["pid"]

            status_cmd = json.dumps({"execute": "guest-exec-status", "arguments": {"pid": pid}})
            deadline = time.time() + self.timeout
            while time.time() < deadline:
                status = json.loads(domain.agent_command(status_cmd, self.timeout))["return"]
                if status["exited"]:
                    return (
                        status.get("exitcode"),
                        _decode(status.get("out-data")),
                        _decode(status.get("err-data")),
                    )
                time.sleep(self.poll_interval)
        except Exception as e:
            raise GuestConfigurationError(f"Guest agent command failed in '{domain.name}': {e}") from e

        raise GuestConfigurationError(
            f"Guest command in '{domain.name}' did not finish within {self.timeout}s"
        )


def _decode(data: Optional[str]) -> str:
    if not data:
        return ""
    return base64.b64decode(data).decode("utf-8", errors="replace")
