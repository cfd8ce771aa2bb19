"""Tests for the discovery pipeline."""

import psutil
from conftest import FakeHost, identities, make_raw

from menubar_core.classifier import Rejection
from menubar_core.discovery import scan_applications
from menubar_shared.rules_schema import ClassificationRules

RULES = ClassificationRules(priority=("Docker",))


class TestScanApplications:
    def test_pipeline_classifies_dedupes_and_orders(self):
        host = FakeHost(
            [
                make_raw("com.vendor.Clipboard", "Clipboard", launched_minutes=5, process_id=1),
                make_raw("com.apple.systemuiserver", "SystemUIServer"),
                make_raw("com.docker.docker", "Docker", launched_minutes=9, process_id=2),
                make_raw("com.vendor.Clipboard", "Clipboard", launched_minutes=7, process_id=3),
                make_raw("com.vendor.Amphetamine", "Amphetamine", launched_minutes=1, process_id=4),
            ]
        )
        result = scan_applications(host, RULES)

        assert result.ok
        assert identities(result.applications) == [
            "com.docker.docker",
            "com.vendor.Amphetamine",
            "com.vendor.Clipboard",
        ]
        assert result.applications[2].process_id == 1
        assert result.rejected == [("com.apple.systemuiserver", Rejection.SYSTEM_VENDOR)]

    def test_same_snapshot_gives_same_order(self):
        host = FakeHost(
            [
                make_raw("com.vendor.Notes", "Notes"),
                make_raw("com.vendor.Clipboard", "Clipboard", launched_minutes=5),
                make_raw("com.docker.docker", "Docker"),
                make_raw("com.vendor.Amphetamine", "Amphetamine", launched_minutes=2),
                make_raw("com.vendor.Notes", "Notes"),
                make_raw("com.vendor.Bluetooth", "Bluetooth"),
            ]
        )
        first = scan_applications(host, RULES)
        second = scan_applications(host, RULES)

        assert identities(first.applications) == identities(second.applications)
        assert [app.order_index for app in second.applications] == list(range(len(second.applications)))

    def test_manual_order_is_applied(self):
        host = FakeHost(
            [
                make_raw("a", "Alpha", launched_minutes=1),
                make_raw("b", "Beta", launched_minutes=2),
            ]
        )
        result = scan_applications(host, RULES, manual_order=["b", "a"])
        assert identities(result.applications) == ["b", "a"]

    def test_provider_failure_is_reported(self):
        host = FakeHost()
        host.error = psutil.AccessDenied()
        result = scan_applications(host, RULES)

        assert not result.ok
        assert result.applications == []
        assert isinstance(result.errors[0], psutil.AccessDenied)

    def test_os_error_is_reported(self):
        host = FakeHost()
        host.error = OSError("table unavailable")
        assert not scan_applications(host, RULES).ok
