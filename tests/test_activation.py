"""Tests for the activation fallback chain and restart procedure."""

from conftest import make_app

from menubar_core.activation import ActivationStrategy, Strategy


def _strategy(host, clock):
    return ActivationStrategy(host, sleep=clock.sleep, clock=clock)


class TestActivate:
    def test_direct_activation_ends_chain(self, fake_host, fake_clock):
        outcome = _strategy(fake_host, fake_clock).activate(make_app("com.vendor.Tool", location="/A.app"))

        assert outcome.succeeded
        assert outcome.via is Strategy.DIRECT_ACTIVATION
        assert fake_host.call_names() == ["activate"]

    def test_falls_back_to_launch(self, fake_host, fake_clock):
        fake_host.activate_result = False
        outcome = _strategy(fake_host, fake_clock).activate(make_app("com.vendor.Tool", location="/A.app"))

        assert outcome.succeeded
        assert outcome.via is Strategy.LAUNCH_BY_IDENTITY
        assert outcome.attempted == (Strategy.DIRECT_ACTIVATION, Strategy.LAUNCH_BY_IDENTITY)
        assert "open" not in fake_host.call_names()

    def test_falls_back_to_open_by_location(self, fake_host, fake_clock):
        fake_host.activate_result = False
        fake_host.launch_result = False
        outcome = _strategy(fake_host, fake_clock).activate(make_app("com.vendor.Tool", location="/A.app"))

        assert outcome.succeeded
        assert outcome.via is Strategy.OPEN_BY_LOCATION
        assert fake_host.calls[-1] == ("open", "/A.app")

    def test_all_strategies_fail(self, fake_host, fake_clock):
        fake_host.activate_result = False
        fake_host.launch_result = False
        fake_host.open_error = OSError("no handler")
        outcome = _strategy(fake_host, fake_clock).activate(make_app("com.vendor.Tool", location="/A.app"))

        assert not outcome.succeeded
        assert outcome.via is None
        assert len(outcome.attempted) == 3

    def test_open_by_location_skipped_without_location(self, fake_host, fake_clock):
        fake_host.activate_result = False
        fake_host.launch_result = False
        outcome = _strategy(fake_host, fake_clock).activate(make_app("com.vendor.Tool"))

        assert not outcome.succeeded
        assert Strategy.OPEN_BY_LOCATION not in outcome.attempted

    def test_provider_errors_count_as_failure(self, fake_host, fake_clock):
        def broken(identity):
            raise RuntimeError("host unavailable")

        fake_host.activate = broken
        outcome = _strategy(fake_host, fake_clock).activate(make_app("com.vendor.Tool"))
        assert outcome.via is Strategy.LAUNCH_BY_IDENTITY


class TestRestart:
    def test_terminate_then_launch(self, fake_host, fake_clock):
        outcome = _strategy(fake_host, fake_clock).restart(make_app("com.vendor.Tool", process_id=7))

        assert fake_host.call_names() == ["terminate", "launch"]
        assert outcome.exit_confirmed
        assert outcome.relaunched
        assert fake_clock.sleeps == []

    def test_polls_until_exit_deadline(self, fake_host, fake_clock):
        fake_host.exit_on_terminate = False
        outcome = _strategy(fake_host, fake_clock).restart(make_app("com.vendor.Tool", process_id=7), wait_seconds=0.5)

        assert not outcome.exit_confirmed
        assert outcome.relaunched
        assert fake_clock.now >= 0.5
        assert all(pause <= 0.1 + 1e-9 for pause in fake_clock.sleeps)
        assert fake_host.call_names() == ["terminate", "launch"]

    def test_unknown_state_waits_full_window(self, fake_host, fake_clock):
        fake_host.exit_on_terminate = False
        fake_host.running[None] = None
        outcome = _strategy(fake_host, fake_clock).restart(make_app("com.vendor.Tool"), wait_seconds=2.0)

        assert fake_clock.sleeps == [2.0]
        assert not outcome.exit_confirmed
        assert outcome.relaunched

    def test_refused_relaunch_is_reported(self, fake_host, fake_clock):
        fake_host.launch_result = False
        outcome = _strategy(fake_host, fake_clock).restart(make_app("com.vendor.Tool", process_id=7))
        assert not outcome.relaunched
