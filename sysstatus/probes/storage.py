#!/usr/bin/env python3
"""
Storage related status probes.
"""

import os
from typing import Any, Dict, List

from .base import StatusProbe, Section, SourceUnavailable, numbered_titles
from ..config import SYS_BLOCK_DIR, DISK_BY_PATH_DIR, UNKNOWN

# Block devices that are not backed by a disk
VIRTUAL_BLOCK_PREFIXES = ("loop", "ram", "zram")

CONTROLLER_PREFIXES = (
    ("nvme", "NVMe"),
    ("mmcblk", "MMC"),
    ("xvd", "virtio"),
    ("vd", "virtio"),
    ("sd", "SCSI"),
    ("hd", "IDE"),
)


def storage_controller(name: str) -> str:
    for prefix, controller in CONTROLLER_PREFIXES:
        if name.startswith(prefix):
            return controller
    return UNKNOWN


def drive_type(name: str, rotational: str) -> str:
    if name.startswith("sr"):
        return "ODD"
    if name.startswith("fd"):
        return "FDD"
    if rotational == "1":
        return "HDD"
    if rotational == "0":
        return "SSD"
    return UNKNOWN


def list_disks(probe: StatusProbe) -> List[Dict[str, Any]]:
    """
    Enumerate the block disks of the system.

    Args:
        probe: Probe whose read helpers are used for every lookup

    Returns:
        One dict per disk with name, model, drive_type, controller, bus_path
        and partitions

    Raises:
        SourceUnavailable: the block device class cannot be listed
    """
    try:
        names = probe.list_dir(SYS_BLOCK_DIR)
    except OSError as e:
        raise SourceUnavailable(f"cannot enumerate block devices: {e}")

    bus_paths = {}
    try:
        for link in probe.list_dir(DISK_BY_PATH_DIR):
            target = probe.resolve_link(os.path.join(DISK_BY_PATH_DIR, link))
            if target:
                bus_paths.setdefault(target, link)
    except OSError:
        probe.unknown("disk bus paths")

    disks = []
    for name in names:
        if name.startswith(VIRTUAL_BLOCK_PREFIXES):
            continue

        disk_dir = os.path.join(SYS_BLOCK_DIR, name)
        try:
            partitions = [entry for entry in probe.list_dir(disk_dir)
                          if entry.startswith(name) and entry != name]
        except OSError:
            partitions = []

        rotational = probe.read_value(os.path.join(disk_dir, "queue", "rotational"))
        disks.append({
            "name": name,
            "model": probe.read_value(os.path.join(disk_dir, "device", "model")) or probe.unknown(f"{name} model"),
            "drive_type": drive_type(name, rotational or ""),
            "controller": storage_controller(name),
            "bus_path": bus_paths.get(name, UNKNOWN),
            "partitions": partitions,
        })

    return disks


class DiskProbe(StatusProbe):
    """Probe for the physical disks and how they are attached."""

    def __init__(self):
        super().__init__("disk", "Disk")

    def gather(self) -> Dict[str, Any]:
        return {"disks": list_disks(self)}

    def build_section(self, facts: Dict[str, Any]) -> Section:
        disks = [disk for disk in facts["disks"] if disk["bus_path"] != UNKNOWN]

        section = Section(self.title)
        for title, disk in zip(numbered_titles("Disk", len(disks)), disks):
            section.add(title, f"{disk['model']} ({disk['name']})")
            section.add(f"{title} Type", disk["drive_type"])
            section.add(f"{title} Controller", disk["controller"])
        return section
