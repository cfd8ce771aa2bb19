"""Tests for cleanup suggestions and status text."""

from conftest import identities, make_app

from menubar_core.advisor import describe_status, suggest_apps_to_hide
from menubar_shared.rules_schema import DEFAULT_LOW_PRIORITY_KEYWORDS


class TestSuggestions:
    def test_matches_name_or_identity(self):
        apps = [
            make_app("com.vendor.Clipboard", "Clipboard"),
            make_app("com.vendor.stats", "Stats"),
            make_app("com.vendor.fancontrol", "Macs Fan Control"),
            make_app("com.vendor.tool", "Photo Tool"),
        ]
        suggested = suggest_apps_to_hide(apps, DEFAULT_LOW_PRIORITY_KEYWORDS)
        assert identities(suggested) == ["com.vendor.stats", "com.vendor.fancontrol", "com.vendor.tool"]

    def test_keywords_are_case_insensitive(self):
        apps = [make_app("x", "CPU Meter")]
        assert identities(suggest_apps_to_hide(apps, ["cpu"])) == ["x"]

    def test_no_keywords_no_suggestions(self):
        assert suggest_apps_to_hide([make_app("x", "Stats")], []) == []


class TestDescribeStatus:
    def test_accessory_app(self):
        assert describe_status(make_app("x")) == "Running • Menu bar app"

    def test_hidden_regular_app(self):
        app = make_app("x", is_accessory_policy=False, is_hidden=True)
        assert describe_status(app) == "Running • Hidden"
