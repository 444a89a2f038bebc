#!/usr/bin/env python3
"""
Network status probe backed by NetworkManager.
"""

from typing import Any, Dict, List

from .base import StatusProbe, Section, SourceUnavailable, MalformedData

ACTIVATED = "activated"

NMCLI_DEVICES = ["nmcli", "--terse", "--fields", "DEVICE", "device", "status"]
NMCLI_ACTIVE_CONNECTIONS = ["nmcli", "--terse", "--fields", "DEVICE,TYPE,STATE", "connection", "show", "--active"]


def split_terse(line: str) -> List[str]:
    """Split an nmcli --terse line on unescaped colons."""
    fields = []
    current = []
    escaped = False
    for char in line:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == ":":
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
    fields.append("".join(current))
    return fields


class NetworkProbe(StatusProbe):
    """Probe for the connection state of each network device."""

    def __init__(self):
        super().__init__("network", "Network")

    def nmcli(self, command: List[str]) -> List[List[str]]:
        output = self.run_command(command)
        if output is None:
            raise SourceUnavailable("NetworkManager is not available")
        return [split_terse(line) for line in output.splitlines() if line.strip()]

    def gather(self) -> Dict[str, Any]:
        devices = [row[0] for row in self.nmcli(NMCLI_DEVICES)]

        connections = {}
        for row in self.nmcli(NMCLI_ACTIVE_CONNECTIONS):
            if len(row) != 3:
                raise MalformedData(f"unexpected active connection entry: {':'.join(row)!r}")
            device, connection_type, state = row
            # Connections without a device (e.g. VPN over another link) are not listed per device
            if device:
                connections.setdefault(device, {"type": connection_type, "state": state})

        return {"devices": devices, "connections": connections}

    def build_section(self, facts: Dict[str, Any]) -> Section:
        section = Section(self.title)
        for device in facts["devices"]:
            connection = facts["connections"].get(device)
            if connection is None:
                continue
            status = "Connected" if connection["state"] == ACTIVATED else "Unknown"
            section.lines.append(f"{device} ({connection['type']}): {status}")
        return section
