#!/usr/bin/env python3
"""
Hardware status probe: baseboard, memory, CPUs, GPUs and the root disk.
"""

import os
import re
import platform
from typing import Any, Dict, List, Optional

import psutil

from .base import (
    StatusProbe, Section, SourceUnavailable, MalformedData, numbered_titles, format_bytes
)
from .storage import list_disks
from ..config import PROC_CPUINFO, DMI_DIR, DRM_DIR, MEMORY_BLOCKS_DIR, UNKNOWN

DRM_CARD_PATTERN = re.compile(r"^card\d+$")
CPU_MODEL_KEYS = ("model name", "cpu model")
# ARM kernels list the board model once, in a block of its own
BOARD_MODEL_KEYS = ("Model", "Hardware")


def parse_cpuinfo(content: str) -> List[str]:
    """Return one model name per physical package, ordered by package id."""
    packages = {}
    board = {}
    for block in re.split(r"\n\s*\n", content):
        fields = {}
        for line in block.splitlines():
            if ":" in line:
                key, value = line.split(":", 1)
                fields[key.strip()] = value.strip()
        for key in BOARD_MODEL_KEYS:
            if fields.get(key):
                board.setdefault(key, fields[key])
        if "processor" not in fields:
            continue

        model = next((fields[key] for key in CPU_MODEL_KEYS if fields.get(key)), None)
        package = fields.get("physical id", "0")
        if packages.get(package) is None:
            packages[package] = model

    fallback = next((board[key] for key in BOARD_MODEL_KEYS if key in board), UNKNOWN)
    ordered = sorted(packages, key=lambda k: int(k) if k.isdigit() else 0)
    return [packages[key] or fallback for key in ordered]


def parse_lspci_device(output: str) -> Optional[str]:
    for line in output.splitlines():
        if line.startswith("Device:"):
            return line.split(":", 1)[1].strip() or None
    return None


class HardwareProbe(StatusProbe):
    """Probe for the machine's hardware."""

    def __init__(self):
        super().__init__("hardware", "Hardware")

    def gather(self) -> Dict[str, Any]:
        cpuinfo = self.read_file(PROC_CPUINFO)
        if cpuinfo is None:
            raise SourceUnavailable(f"cannot read {PROC_CPUINFO}")
        cpus = parse_cpuinfo(cpuinfo)
        if not cpus:
            raise MalformedData(f"no processors listed in {PROC_CPUINFO}")

        try:
            usable_memory = psutil.virtual_memory().total
            swap = psutil.swap_memory().total
        except (OSError, RuntimeError) as e:
            raise SourceUnavailable(f"memory counters unavailable: {e}")

        root_device, root_fstype = self.root_mount()

        return {
            "vendor": self.read_value(os.path.join(DMI_DIR, "board_vendor")),
            "product": self.read_value(os.path.join(DMI_DIR, "board_name")),
            "physical_memory": self.physical_memory(),
            "usable_memory": usable_memory,
            "swap": swap,
            "arch": platform.machine(),
            "cpus": cpus,
            "gpus": self.list_gpus(),
            "disk_free": self.disk_free(),
            "root_fstype": root_fstype,
            "root_controller": self.root_controller(root_device),
        }

    def physical_memory(self) -> Optional[int]:
        """Sum of online memory blocks, which includes memory reserved by the kernel."""
        block_size = self.read_value(os.path.join(MEMORY_BLOCKS_DIR, "block_size_bytes"))
        if block_size is None:
            return None
        try:
            size = int(block_size, 16)
            blocks = [entry for entry in self.list_dir(MEMORY_BLOCKS_DIR) if entry.startswith("memory")]
        except (ValueError, OSError):
            return None

        online = 0
        for block in blocks:
            state = self.read_value(os.path.join(MEMORY_BLOCKS_DIR, block, "online"))
            if state in (None, "1"):
                online += 1
        return online * size or None

    def list_gpus(self) -> List[Dict[str, str]]:
        try:
            cards = [entry for entry in self.list_dir(DRM_DIR) if DRM_CARD_PATTERN.match(entry)]
        except FileNotFoundError:
            # No DRM subsystem, e.g. headless machines
            return []
        except OSError as e:
            raise SourceUnavailable(f"cannot enumerate graphics cards: {e}")

        gpus = []
        for card in cards:
            device = os.path.join(DRM_DIR, card, "device")
            gpus.append({
                "product": self.gpu_product(device) or self.unknown(f"{card} product"),
                "driver": self.resolve_link(os.path.join(device, "driver")) or self.unknown(f"{card} driver"),
            })
        return gpus

    def gpu_product(self, device: str) -> Optional[str]:
        address = self.resolve_link(device)
        if address:
            output = self.run_command(["lspci", "-vmm", "-s", address])
            if output:
                product = parse_lspci_device(output)
                if product:
                    return product

        vendor_id = self.read_value(os.path.join(device, "vendor"))
        device_id = self.read_value(os.path.join(device, "device"))
        if vendor_id and device_id:
            return f"{vendor_id}:{device_id}"
        return None

    def disk_free(self) -> Optional[int]:
        try:
            return psutil.disk_usage(os.getcwd()).free
        except OSError:
            return None

    def root_mount(self):
        try:
            for partition in psutil.disk_partitions(all=False):
                if partition.mountpoint == "/":
                    return partition.device, partition.fstype
        except OSError as e:
            self.unknown(f"mounted partitions ({e})")
        return None, None

    def root_controller(self, root_device: Optional[str]) -> Optional[str]:
        if not root_device:
            return None
        device = os.path.basename(root_device)
        try:
            disks = list_disks(self)
        except SourceUnavailable:
            return None
        for disk in disks:
            if disk["name"] == device or device in disk["partitions"]:
                return disk["controller"]
        return None

    def build_section(self, facts: Dict[str, Any]) -> Section:
        section = Section(self.title)
        section.add("Vendor", facts["vendor"] or self.unknown("baseboard vendor"))
        section.add("Product", facts["product"] or self.unknown("baseboard product"))
        section.add("Memory", f"{format_bytes(facts['physical_memory'])} (physical), "
                              f"{format_bytes(facts['usable_memory'])} (usable)")
        section.add("Swap", format_bytes(facts["swap"]))

        arch = facts["arch"] or UNKNOWN
        for title, model in zip(numbered_titles("CPU", len(facts["cpus"])), facts["cpus"]):
            section.add(title, f"{model} ({arch})")

        for title, gpu in zip(numbered_titles("GPU", len(facts["gpus"])), facts["gpus"]):
            section.add(title, gpu["product"])
            section.add(f"{title} Driver", gpu["driver"])

        section.add("Disk Free", format_bytes(facts["disk_free"]))
        section.add("Disk Type", facts["root_controller"] or self.unknown("root storage controller"))
        section.add("Filesystem", facts["root_fstype"] or self.unknown("root filesystem type"))
        return section
