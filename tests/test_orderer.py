"""Tests for heuristic ordering and manual overrides."""

from conftest import identities, make_app

from menubar_core.orderer import UNRANKED, apply_manual_order, order, priority_rank

PRIORITY = ("Bartender", "Docker", "iStat Menus")


class TestPriorityRank:
    def test_rank_is_index_of_first_matching_entry(self):
        lowered = tuple(entry.lower() for entry in PRIORITY)
        assert priority_rank(make_app("x", "Docker Desktop"), lowered) == 1
        assert priority_rank(make_app("x", "Bartender 5"), lowered) == 0

    def test_unranked_application(self):
        assert priority_rank(make_app("x", "Clipboard"), ("docker",)) == UNRANKED

    def test_missing_name_is_unranked(self):
        app = make_app("x")
        app.display_name = None
        assert priority_rank(app, ("docker",)) == UNRANKED


class TestOrder:
    def test_priority_before_unranked(self):
        apps = [
            make_app("clip", "Clipboard", launched_minutes=0),
            make_app("docker", "Docker", launched_minutes=30),
            make_app("bar", "Bartender", launched_minutes=60),
        ]
        assert identities(order(apps, PRIORITY)) == ["bar", "docker", "clip"]

    def test_launch_time_breaks_ties(self):
        apps = [
            make_app("late", "Zeta", launched_minutes=10),
            make_app("early", "Alpha", launched_minutes=5),
        ]
        assert identities(order(apps, PRIORITY)) == ["early", "late"]

    def test_name_breaks_ties_when_launch_time_missing(self):
        apps = [
            make_app("b", "Beta", launched_minutes=1),
            make_app("a", "Alpha"),
        ]
        assert identities(order(apps, PRIORITY)) == ["a", "b"]

    def test_order_index_is_reassigned(self):
        apps = [make_app("b", "Beta"), make_app("a", "Alpha")]
        ordered = order(apps, PRIORITY)
        assert [app.order_index for app in ordered] == [0, 1]

    def test_ordering_is_idempotent(self):
        apps = [
            make_app("clip", "Clipboard", launched_minutes=3),
            make_app("docker", "Docker"),
            make_app("notes", "Notes", launched_minutes=1),
            make_app("amp", "Amphetamine"),
        ]
        once = order(apps, PRIORITY)
        twice = order(once, PRIORITY)
        assert identities(once) == identities(twice)


class TestManualOrder:
    def test_manual_order_refills_pinned_slots(self):
        ordered = [make_app(identity) for identity in ("a", "b", "c", "d")]
        result = apply_manual_order(ordered, ["c", "a"])
        assert identities(result) == ["c", "b", "a", "d"]

    def test_unknown_identities_are_ignored(self):
        ordered = [make_app(identity) for identity in ("a", "b")]
        result = apply_manual_order(ordered, ["gone", "b", "a"])
        assert identities(result) == ["b", "a"]

    def test_new_apps_keep_heuristic_slot(self):
        ordered = [make_app(identity) for identity in ("new", "a", "b")]
        result = apply_manual_order(ordered, ["b", "a"])
        assert identities(result) == ["new", "b", "a"]
        assert [app.order_index for app in result] == [0, 1, 2]

    def test_empty_manual_order_is_noop(self):
        ordered = [make_app(identity) for identity in ("a", "b")]
        assert identities(apply_manual_order(ordered, [])) == ["a", "b"]
