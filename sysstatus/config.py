#!/usr/bin/env python3
"""
Runtime settings and system locations used by the status probes.
"""

from dataclasses import dataclass
from typing import Optional

# Placeholder for facts that could not be resolved
UNKNOWN = "unknown"

OS_RELEASE_PATHS = ("/etc/os-release", "/usr/lib/os-release")
ATOMIC_VARIANT_PREFIXES = ("Atomic",)

PROC_CPUINFO = "/proc/cpuinfo"
DMI_DIR = "/sys/class/dmi/id"
DRM_DIR = "/sys/class/drm"
MEMORY_BLOCKS_DIR = "/sys/devices/system/memory"
SYS_BLOCK_DIR = "/sys/block"
DISK_BY_PATH_DIR = "/dev/disk/by-path"

OUTPUT_FORMATS = ("text", "json")


@dataclass
class Settings:
    """Options collected from the command line."""

    output_format: str = "text"
    keep_going: bool = False
    timeout: Optional[float] = None
    color: bool = True
    verbose: bool = False
