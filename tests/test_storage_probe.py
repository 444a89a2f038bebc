import unittest

from sysstatus.probes.base import Section, ProbeFailure, SOURCE_UNAVAILABLE
from sysstatus.probes.storage import DiskProbe, storage_controller, drive_type

from tests.fakes import install_fake_os


class DiskProbeTests(unittest.TestCase):
    def setUp(self):
        self.files = {
            "/sys/block/nvme0n1/queue/rotational": "0\n",
            "/sys/block/nvme0n1/device/model": "Samsung SSD 980 1TB\n",
            "/sys/block/sda/queue/rotational": "1\n",
            "/sys/block/sda/device/model": "WDC WD10EZEX-08W\n",
            "/sys/block/sdb/queue/rotational": "1\n",
            "/sys/block/sdb/device/model": "Virtual Disk\n",
        }
        self.dirs = {
            "/sys/block": ["loop0", "nvme0n1", "sda", "sdb", "zram0"],
            "/sys/block/nvme0n1": ["nvme0n1p1", "queue", "device"],
            "/sys/block/sda": ["sda1", "queue", "device"],
            "/sys/block/sdb": ["queue", "device"],
            "/dev/disk/by-path": ["pci-0000:02:00.0-nvme-1", "pci-0000:00:17.0-ata-1", "pci-0000:00:17.0-ata-1-part1"],
        }
        self.links = {
            "/dev/disk/by-path/pci-0000:02:00.0-nvme-1": "nvme0n1",
            "/dev/disk/by-path/pci-0000:00:17.0-ata-1": "sda",
            "/dev/disk/by-path/pci-0000:00:17.0-ata-1-part1": "sda1",
        }

    def run_probe(self):
        return install_fake_os(DiskProbe(), files=self.files, dirs=self.dirs, links=self.links).run()

    def test_lists_disks_with_bus_path(self):
        section = self.run_probe()
        self.assertIsInstance(section, Section)
        self.assertEqual(section.title, "Disk")
        self.assertEqual(section.lines, [
            "Disk0: Samsung SSD 980 1TB (nvme0n1)",
            "Disk0 Type: SSD",
            "Disk0 Controller: NVMe",
            "Disk1: WDC WD10EZEX-08W (sda)",
            "Disk1 Type: HDD",
            "Disk1 Controller: SCSI",
        ])

    def test_single_disk_is_not_numbered(self):
        self.dirs["/sys/block"] = ["sda"]
        section = self.run_probe()
        self.assertEqual(section.lines, [
            "Disk: WDC WD10EZEX-08W (sda)",
            "Disk Type: HDD",
            "Disk Controller: SCSI",
        ])

    def test_no_bus_paths_gives_empty_section(self):
        del self.dirs["/dev/disk/by-path"]
        section = self.run_probe()
        self.assertIsInstance(section, Section)
        self.assertEqual(section.lines, [])

    def test_unreadable_block_class_fails(self):
        del self.dirs["/sys/block"]
        result = self.run_probe()
        self.assertIsInstance(result, ProbeFailure)
        self.assertEqual(result.probe, "disk")
        self.assertEqual(result.kind, SOURCE_UNAVAILABLE)

    def test_controller_and_drive_type(self):
        self.assertEqual(storage_controller("vda"), "virtio")
        self.assertEqual(storage_controller("mmcblk0"), "MMC")
        self.assertEqual(storage_controller("pmem0"), "unknown")
        self.assertEqual(drive_type("sr0", "1"), "ODD")
        self.assertEqual(drive_type("sda", ""), "unknown")


if __name__ == "__main__":
    unittest.main()
