import os
import unittest
from unittest import mock

from sysstatus.probes.base import Section, ProbeFailure, SOURCE_UNAVAILABLE, MALFORMED_DATA
from sysstatus.probes.system import OsReleaseProbe, DesktopProbe, UptimeStatusProbe, parse_os_release

from tests.fakes import install_fake_os

ULTRAMARINE_RELEASE = """NAME="Ultramarine"
VERSION="40"
ID=ultramarine
# comment lines are ignored
VARIANT="Atomic Desktop"
VARIANT_ID=atomic
"""


class OsReleaseProbeTests(unittest.TestCase):
    def run_probe(self, files):
        return install_fake_os(OsReleaseProbe(), files=files).run()

    def test_atomic_release(self):
        section = self.run_probe({"/etc/os-release": ULTRAMARINE_RELEASE})
        self.assertIsInstance(section, Section)
        self.assertEqual(section.title, "System")
        self.assertEqual(section.lines, [
            "Name: Ultramarine",
            "Version: 40",
            "Variant: Atomic Desktop",
            "Atomic: True",
        ])

    def test_non_atomic_variant(self):
        section = self.run_probe({"/etc/os-release": 'NAME=Fedora\nVERSION="40 (Workstation Edition)"\nVARIANT="Workstation Edition"\n'})
        self.assertIn("Version: 40 (Workstation Edition)", section.lines)
        self.assertIn("Atomic: False", section.lines)

    def test_missing_variant_uses_placeholder(self):
        section = self.run_probe({"/etc/os-release": "NAME=Debian\nVERSION=12\n"})
        self.assertEqual(section.lines, [
            "Name: Debian",
            "Version: 12",
            "Variant: unknown",
            "Atomic: False",
        ])

    def test_falls_back_to_usr_lib(self):
        section = self.run_probe({"/usr/lib/os-release": ULTRAMARINE_RELEASE})
        self.assertEqual(section.lines[0], "Name: Ultramarine")

    def test_unreadable_release_fails(self):
        result = self.run_probe({})
        self.assertIsInstance(result, ProbeFailure)
        self.assertEqual(result.probe, "os_release")
        self.assertEqual(result.kind, SOURCE_UNAVAILABLE)

    def test_malformed_release_fails(self):
        result = self.run_probe({"/etc/os-release": "NAME=Ultramarine\nthis is not a key value pair\n"})
        self.assertIsInstance(result, ProbeFailure)
        self.assertEqual(result.kind, MALFORMED_DATA)

    def test_parse_strips_quotes(self):
        self.assertEqual(parse_os_release("A='single'\nB=\"double\"\nC=bare\n"),
                         {"A": "single", "B": "double", "C": "bare"})

    def test_parse_unescapes_double_quoted_values(self):
        release = parse_os_release(
            'PRETTY_NAME="Ultramarine \\"Atomic\\" 40"\n'
            'HOME_URL="https://ultramarine-linux.org/\\$path"\n'
            'SUPPORT="back\\\\slash"\n'
            "LITERAL='no \\\\$escapes'\n"
        )
        self.assertEqual(release["PRETTY_NAME"], 'Ultramarine "Atomic" 40')
        self.assertEqual(release["HOME_URL"], "https://ultramarine-linux.org/$path")
        self.assertEqual(release["SUPPORT"], "back\\slash")
        self.assertEqual(release["LITERAL"], "no \\\\$escapes")


class DesktopProbeTests(unittest.TestCase):
    def run_with_env(self, env):
        with mock.patch.dict(os.environ, env, clear=True):
            return DesktopProbe().run()

    def test_wayland_takes_precedence(self):
        section = self.run_with_env({"WAYLAND_DISPLAY": "wayland-0", "DISPLAY": ":0", "XDG_CURRENT_DESKTOP": "GNOME"})
        self.assertEqual(section.lines, ["Name: GNOME", "Protocol: Wayland"])

    def test_x11_only(self):
        section = self.run_with_env({"DISPLAY": ":0", "XDG_CURRENT_DESKTOP": "KDE"})
        self.assertEqual(section.lines, ["Name: KDE", "Protocol: X11"])

    def test_wayland_only(self):
        section = self.run_with_env({"WAYLAND_DISPLAY": "wayland-1"})
        self.assertIn("Protocol: Wayland", section.lines)

    def test_nothing_set(self):
        section = self.run_with_env({})
        self.assertIsInstance(section, Section)
        self.assertEqual(section.lines, ["Name: Unknown", "Protocol: Unknown"])

    def test_empty_values_count_as_unset(self):
        section = self.run_with_env({"WAYLAND_DISPLAY": "", "DISPLAY": ""})
        self.assertIn("Protocol: Unknown", section.lines)


class UptimeStatusProbeTests(unittest.TestCase):
    def setUp(self):
        self.commands = {
            ("rpm", "-qa"): "bash-5.2.26-3.fc40.x86_64\nkernel-6.8.9-300.fc40.x86_64\nglibc-2.39-8.fc40.x86_64\n",
            ("flatpak", "list", "--system", "--app", "--columns=application"): "org.mozilla.firefox\norg.gnome.Calculator\n",
        }

    def run_probe(self, boot_time=1000.0, now=1000.0 + 90061):
        probe = install_fake_os(UptimeStatusProbe(), commands=self.commands)
        with mock.patch("sysstatus.probes.system.psutil") as psutil, \
                mock.patch("sysstatus.probes.system.time") as time, \
                mock.patch("sysstatus.probes.system.platform.release", return_value="6.8.9-300.fc40.x86_64"):
            if isinstance(boot_time, Exception):
                psutil.boot_time.side_effect = boot_time
            else:
                psutil.boot_time.return_value = boot_time
            time.time.return_value = now
            return probe.run()

    def test_status_lines(self):
        section = self.run_probe()
        self.assertEqual(section.title, "Status")
        self.assertEqual(section.lines, [
            "Uptime: 1d 1h 1m 1s",
            "Kernel: 6.8.9-300.fc40.x86_64",
            "Packages: 3 rpms, 2 system flatpaks, unknown user flatpaks",
        ])

    def test_short_uptime(self):
        section = self.run_probe(now=1000.0 + 3725)
        self.assertEqual(section.lines[0], "Uptime: 1h 2m 5s")

    def test_uptime_failure(self):
        result = self.run_probe(boot_time=RuntimeError("/proc/stat missing"))
        self.assertIsInstance(result, ProbeFailure)
        self.assertEqual(result.probe, "status")
        self.assertEqual(result.kind, SOURCE_UNAVAILABLE)


if __name__ == "__main__":
    unittest.main()
