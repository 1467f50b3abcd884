#!/usr/bin/env python3
"""
Interface device XML generation for libvirt.
"""

import xml.etree.ElementTree as ET


def generate_interface_xml(slot: int, network_name: str, model: str = "virtio") -> str:
    """Generate the ``<interface>`` device XML for one slot.

    The slot number is carried in a user alias (``ua-net<slot>``) so the
    device can be found again in the domain XML.
    """
    interface = ET.Element("interface", type="network")
    ET.SubElement(interface, "source", network=network_name)
    ET.SubElement(interface, "model", type=model)
    ET.SubElement(interface, "alias", name=f"ua-net{slot}")

    ET.indent(interface, space="  ")
    return ET.tostring(interface, encoding="unicode")
