"""Tests for score awards and popups."""

import jax.numpy as jnp
import numpy as np
import pytest

from conftest import patch_state, index_state
from hotair import (
    POPUP_MIDDLE,
    POPUP_MOUNTAIN,
    POPUP_TIME,
    PopupBuffer,
    constant_controls,
    create_state,
    popup_messages,
    rollout,
    set_burner,
    step,
)
from hotair.scoring import popup_text, prune_popups, push_popup


class TestClimbPastMountainLine:
    """Full burner from the ground until the balloon passes 100 m."""

    @pytest.fixture(scope="class")
    def climb(self):
        state = set_burner(create_state(), 100.0)
        _, trajectory = rollout(state, jnp.ones(600), constant_controls(600))
        altitude = np.asarray(trajectory.altitude)
        crossed = np.nonzero(altitude >= 100.0)[0]
        assert crossed.size > 0
        return trajectory, int(crossed[0])

    def test_mountain_bonus_awarded_once(self, climb):
        trajectory, t = climb
        score = np.asarray(trajectory.score)
        accum = np.asarray(trajectory.flight_score_accum)
        time_award = int(accum[t] < accum[t - 1])

        assert score[t] - score[t - 1] - time_award == 10
        assert bool(trajectory.was_above_mountain_line[t])
        assert not bool(trajectory.was_above_mountain_line[t - 1])

    def test_score_never_decreases(self, climb):
        trajectory, _ = climb
        assert np.all(np.diff(np.asarray(trajectory.score)) >= 0)

    def test_popup_visible_for_ninety_ticks(self, climb):
        trajectory, t = climb
        assert t + 91 < 600

        def has_mountain_popup(i):
            popups = index_state(trajectory, i).popups
            match = (
                np.asarray(popups.active)
                & (np.asarray(popups.kind) == POPUP_MOUNTAIN)
                & (np.asarray(popups.tick) == t)
            )
            return bool(match.any())

        assert not bool(trajectory.game_over[t + 91])
        assert has_mountain_popup(t)
        assert has_mountain_popup(t + 90)
        assert not has_mountain_popup(t + 91)

    def test_popup_message_text(self, climb):
        trajectory, t = climb
        messages = popup_messages(index_state(trajectory, t))
        assert ("+10 Peak!", t) in messages


class TestLineCrossings:
    """Crossing bonuses are awarded whenever the at-or-above predicate flips."""

    def test_upward_mountain_crossing(self, airborne_state):
        state = patch_state(airborne_state, altitude=99.5, velocity=1.0)
        state = step(state, 1.0)
        assert float(state.altitude) >= 100.0
        assert int(state.score) == 10
        assert bool(state.was_above_mountain_line)

    def test_downward_mountain_crossing(self, airborne_state):
        state = patch_state(airborne_state, altitude=100.5, velocity=-1.0, was_above_mountain_line=True)
        state = step(state, 1.0)
        assert float(state.altitude) < 100.0
        assert int(state.score) == 10
        assert not bool(state.was_above_mountain_line)

    def test_no_repeat_while_above(self, airborne_state):
        state = patch_state(airborne_state, altitude=150.0, velocity=0.5, was_above_mountain_line=True)
        state = step(state, 1.0)
        assert int(state.score) == 0

    def test_middle_crossing(self, airborne_state):
        state = patch_state(
            airborne_state, altitude=399.5, velocity=1.0, was_above_mountain_line=True
        )
        state = step(state, 1.0)
        assert int(state.score) == 5
        assert bool(state.was_above_middle_line)
        assert popup_messages(state) == [("+5 Mid!", 0)]

    def test_no_bonus_before_liftoff(self, fresh_state):
        """A mismatched latch on the ground does not pay out before the first liftoff."""
        state = patch_state(fresh_state, was_above_mountain_line=True)
        state = step(state, 1.0)
        assert int(state.score) == 0
        assert bool(state.was_above_mountain_line)


class TestTimeAward:
    """One point for every five seconds airborne."""

    def test_award_when_accumulator_fills(self, airborne_state):
        state = patch_state(airborne_state, flight_score_accum=4.99)
        state = step(state, 1.0)
        assert int(state.score) == 1
        assert float(state.flight_score_accum) == pytest.approx(4.99 + 1.0 / 60.0 - 5.0, abs=1e-4)
        assert popup_messages(state) == [("+1", 0)]

    def test_accumulates_while_airborne(self, airborne_state):
        state = step(airborne_state, 3.0)
        assert float(state.flight_score_accum) == pytest.approx(3.0 / 60.0)
        assert int(state.score) == 0

    def test_frozen_while_landed(self, fresh_state):
        state = patch_state(fresh_state, flight_score_accum=2.0)
        state = step(state, 1.0)
        assert float(state.flight_score_accum) == 2.0
        assert int(state.score) == 0


class TestPopups:
    """Popup ring buffer and expiry."""

    def test_prune_boundary(self):
        popups = push_popup(PopupBuffer(), POPUP_TIME, jnp.int32(10), jnp.bool_(True))
        assert bool(prune_popups(popups, jnp.int32(100), 90).active[0])
        assert not bool(prune_popups(popups, jnp.int32(101), 90).active[0])

    def test_disabled_push_is_noop(self):
        popups = push_popup(PopupBuffer(), POPUP_TIME, jnp.int32(3), jnp.bool_(False))
        assert int(popups.head) == 0
        assert not bool(popups.active.any())

    def test_ring_overwrites_oldest(self):
        popups = PopupBuffer()
        for i in range(20):
            popups = push_popup(popups, POPUP_MIDDLE, jnp.int32(i), jnp.bool_(True))
        assert int(popups.head) == 20
        assert bool(popups.active.all())

        state = create_state().replace(popups=popups)
        ticks = [tick for _, tick in popup_messages(state)]
        assert ticks == list(range(4, 20))

    def test_popup_text(self, params):
        assert popup_text(POPUP_TIME, params) == "+1"
        assert popup_text(POPUP_MOUNTAIN, params) == "+10 Peak!"
        assert popup_text(POPUP_MIDDLE, params) == "+5 Mid!"
        with pytest.raises(ValueError):
            popup_text(0, params)
