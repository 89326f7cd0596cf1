"""
Test suite for AnimationDriver.

Tests cover:
- STOPPED / RUNNING state machine
- Day progression from synthetic timestamps
- Full-orbit periodicity independent of the number of days
- Cancellation and stale steps
- Bound display listeners
"""

import pytest

from noonshift import (
    AnimationDriver, ChartAdapter, DriverState, ManualFrameScheduler,
    ObliquityController, PlotlyChart, PlotlyRenderer, temp_config,
)


class FakeClock:
    """Millisecond clock set by the test."""

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class NonCancellingScheduler(ManualFrameScheduler):
    """Scheduler that drops cancellations, so stale steps still fire."""

    def cancel(self, token):
        pass


def make_controller(num_days=16, current_day=0):
    return ObliquityController(PlotlyRenderer(), ChartAdapter(PlotlyChart()),
                               obliquity_deg=23.4, num_days=num_days,
                               current_day=current_day)


@pytest.fixture
def clock():
    return FakeClock(1000.0)


@pytest.fixture
def scheduler():
    return ManualFrameScheduler()


@pytest.fixture
def controller():
    return make_controller()


@pytest.fixture
def driver(controller, scheduler, clock):
    return AnimationDriver(controller, scheduler, time_source=clock)


class TestStateMachine:
    """Transitions between STOPPED and RUNNING."""

    def test_initially_stopped(self, driver, scheduler):
        assert driver.state == DriverState.STOPPED
        assert not driver.is_running
        assert scheduler.pending == 0

    def test_start(self, driver, scheduler):
        driver.start()
        assert driver.state == DriverState.RUNNING
        assert scheduler.pending == 1

    def test_start_twice_is_noop(self, driver, scheduler):
        driver.start()
        driver.start()
        assert scheduler.pending == 1

    def test_stop(self, driver, scheduler):
        driver.start()
        driver.stop()
        assert driver.state == DriverState.STOPPED
        assert scheduler.pending == 0

    def test_stop_when_stopped_is_noop(self, driver, scheduler):
        driver.stop()
        assert driver.state == DriverState.STOPPED

    def test_reschedules_every_frame(self, driver, scheduler, clock):
        driver.start()
        for _ in range(5):
            clock.now += 16.0
            assert scheduler.tick() == 1
            assert scheduler.pending == 1

    def test_default_duration_from_config(self, controller, scheduler):
        assert AnimationDriver(controller, scheduler).orbit_duration_ms == 4000.0
        with temp_config(ORBIT_DURATION_MS=1000.0):
            assert AnimationDriver(controller, scheduler).orbit_duration_ms == 1000.0

    def test_invalid_duration(self, controller, scheduler):
        with pytest.raises(ValueError):
            AnimationDriver(controller, scheduler, orbit_duration_ms=0)


class TestProgression:
    """Day computed from elapsed wall-clock time."""

    @pytest.mark.parametrize("elapsed,expected", [
        (0.0, 0), (250.0, 1), (1000.0, 4), (2000.0, 8), (3999.0, 15),
    ])
    def test_day_from_elapsed(self, driver, controller, scheduler, clock,
                              elapsed, expected):
        driver.start()
        clock.now += elapsed
        scheduler.tick()
        assert controller.current_day == expected

    def test_starts_from_current_day(self, scheduler, clock):
        controller = make_controller(current_day=10)
        driver = AnimationDriver(controller, scheduler, time_source=clock)
        driver.start()
        clock.now += 1000.0
        scheduler.tick()
        assert controller.current_day == (10 + 4) % 16

    def test_wraps_around(self, scheduler, clock):
        controller = make_controller(current_day=14)
        driver = AnimationDriver(controller, scheduler, time_source=clock)
        driver.start()
        clock.now += 1000.0
        scheduler.tick()
        assert controller.current_day == 2

    @pytest.mark.parametrize("num_days,start_day", [(16, 0), (16, 5), (365, 200), (2, 1)])
    def test_full_orbit_returns_to_start(self, scheduler, clock, num_days, start_day):
        controller = make_controller(num_days=num_days, current_day=start_day)
        driver = AnimationDriver(controller, scheduler, time_source=clock)
        driver.start()
        clock.now += 1500.0
        scheduler.tick()
        clock.now += 2500.0
        scheduler.tick()
        assert controller.current_day == start_day

    def test_orbit_duration_independent_of_day_count(self, scheduler, clock):
        controller = make_controller(num_days=365)
        driver = AnimationDriver(controller, scheduler, time_source=clock)
        driver.start()
        clock.now += 2000.0
        scheduler.tick()
        assert controller.current_day == 182

    def test_follows_day_count_change(self, driver, controller, scheduler, clock):
        driver.start()
        controller.set_day_count(100)
        clock.now += 1000.0
        scheduler.tick()
        assert controller.current_day == 25


class TestCancellation:
    """No step acts after stop()."""

    def test_no_progress_after_stop(self, driver, controller, scheduler, clock):
        driver.start()
        driver.stop()
        clock.now += 1000.0
        scheduler.tick()
        assert controller.current_day == 0

    def test_stale_step_ignored(self, controller, clock):
        scheduler = NonCancellingScheduler()
        driver = AnimationDriver(controller, scheduler, time_source=clock)
        driver.start()
        driver.stop()
        clock.now += 1000.0
        scheduler.tick()
        assert controller.current_day == 0
        assert scheduler.pending == 0

    def test_stale_step_ignored_after_restart(self, controller, clock):
        scheduler = NonCancellingScheduler()
        driver = AnimationDriver(controller, scheduler, time_source=clock)
        driver.start()
        driver.stop()
        driver.start()
        # one live step and one stale step from the first run
        assert scheduler.pending == 2
        clock.now += 1000.0
        scheduler.tick()
        assert controller.current_day == 4
        assert scheduler.pending == 1

    def test_restart_uses_new_start(self, driver, controller, scheduler, clock):
        driver.start()
        clock.now += 1000.0
        scheduler.tick()
        driver.stop()
        clock.now += 10_000.0
        driver.start()
        clock.now += 500.0
        scheduler.tick()
        assert controller.current_day == 4 + 2


class TestBinding:
    """Listeners reflecting the day back to display elements."""

    def test_listener_receives_new_days(self, driver, scheduler, clock):
        seen = []
        driver.bind(seen.append)
        driver.start()
        for _ in range(4):
            clock.now += 250.0
            scheduler.tick()
        assert seen == [1, 2, 3, 4]

    def test_listener_not_called_without_change(self, driver, scheduler, clock):
        seen = []
        driver.bind(seen.append)
        driver.start()
        clock.now += 10.0
        scheduler.tick()
        assert seen == []

    def test_stop_from_listener_leaves_nothing_scheduled(self, driver, scheduler, clock):
        driver.bind(lambda day: driver.stop() if day == 2 else None)
        driver.start()
        clock.now += 500.0
        scheduler.tick()
        assert driver.state == DriverState.STOPPED
        assert scheduler.pending == 0

    def test_stop_from_readout_listener(self, driver, controller, scheduler, clock):
        controller.on_readout(lambda readout: driver.stop())
        driver.start()
        clock.now += 500.0
        scheduler.tick()
        assert driver.state == DriverState.STOPPED
        assert scheduler.pending == 0
        clock.now += 500.0
        scheduler.tick()
        assert controller.current_day == 2

    def test_restart_from_listener_keeps_one_step(self, driver, controller,
                                                  scheduler, clock):
        def restart(day):
            if day == 2:
                driver.stop()
                driver.start()

        driver.bind(restart)
        driver.start()
        clock.now += 500.0
        scheduler.tick()
        assert driver.is_running
        assert scheduler.pending == 1
        driver.stop()
        assert scheduler.pending == 0
