"""Tests for the per-tick step, player actions and rollouts."""

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from conftest import patch_state, index_state, trees_equal
from hotair import (
    FlightControls,
    GameOverReason,
    add_sandbag,
    constant_controls,
    create_state,
    drop_sandbag,
    frame_dt,
    reset,
    rollout,
    rollout_batch,
    set_burner,
    stack_states,
    step,
)


def assert_trees_close(a, b):
    jax.tree.map(lambda x, y: np.testing.assert_allclose(
        np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64), rtol=1e-6, atol=1e-6
    ), a, b)


class TestCreateState:
    """Fresh episodes."""

    def test_initial_values(self, fresh_state):
        assert float(fresh_state.altitude) == 0.0
        assert float(fresh_state.velocity) == 0.0
        assert float(fresh_state.air_temperature) == 20.0
        assert float(fresh_state.burner_power) == 0.0
        assert float(fresh_state.fuel) == 100.0
        assert int(fresh_state.sandbags) == 4
        assert int(fresh_state.max_sandbags) == 6
        assert bool(fresh_state.is_landed)
        assert not bool(fresh_state.game_over)
        assert fresh_state.reason == GameOverReason.NONE
        assert float(fresh_state.countdown) == 30.0
        assert not bool(fresh_state.has_lifted_off)
        assert int(fresh_state.score) == 0
        assert int(fresh_state.tick) == 0
        assert not bool(fresh_state.popups.active.any())

    def test_custom_ballast(self):
        state = create_state(sandbags=0, max_sandbags=2)
        assert int(state.sandbags) == 0
        assert int(state.max_sandbags) == 2

    @pytest.mark.parametrize("sandbags,max_sandbags", [(-1, 6), (7, 6), (0, -1)])
    def test_invalid_ballast(self, sandbags, max_sandbags):
        with pytest.raises(ValueError):
            create_state(sandbags=sandbags, max_sandbags=max_sandbags)

    def test_reset_discards_episode(self):
        state = reset()
        assert trees_equal(state, create_state())


class TestActions:
    """Immediate-apply player actions."""

    def test_set_burner_clamps(self, fresh_state):
        assert float(set_burner(fresh_state, 150.0).burner_power) == 100.0
        assert float(set_burner(fresh_state, -5.0).burner_power) == 0.0
        assert float(set_burner(fresh_state, 42.0).burner_power) == 42.0

    def test_set_burner_ignored_without_fuel(self, fresh_state):
        state = patch_state(fresh_state, fuel=0.0)
        assert float(set_burner(state, 80.0).burner_power) == 0.0

    def test_set_burner_ignored_after_game_over(self, fresh_state):
        state = patch_state(fresh_state, game_over=True)
        assert float(set_burner(state, 80.0).burner_power) == 0.0

    def test_add_sandbag_on_ground(self, fresh_state):
        assert int(add_sandbag(fresh_state).sandbags) == 5

    def test_add_sandbag_at_capacity(self, fresh_state):
        state = patch_state(fresh_state, sandbags=6)
        assert int(add_sandbag(state).sandbags) == 6

    def test_add_sandbag_in_flight_ignored(self, airborne_state):
        assert int(add_sandbag(airborne_state).sandbags) == 4

    def test_drop_sandbag_in_flight(self, airborne_state):
        assert int(drop_sandbag(airborne_state).sandbags) == 3

    def test_drop_sandbag_when_empty(self, fresh_state):
        state = patch_state(fresh_state, sandbags=0)
        assert int(drop_sandbag(state).sandbags) == 0

    def test_actions_ignored_after_game_over(self, fresh_state):
        state = patch_state(fresh_state, game_over=True)
        assert int(drop_sandbag(state).sandbags) == 4
        assert int(add_sandbag(state).sandbags) == 4

    def test_action_dtypes_preserved(self, fresh_state):
        assert trees_equal(drop_sandbag(add_sandbag(fresh_state)), fresh_state)


class TestStep:
    """Single-tick behaviour."""

    def test_tick_counter(self, fresh_state):
        state = step(step(fresh_state, 1.0), 1.0)
        assert int(state.tick) == 2

    def test_sandbag_delta_clamped(self, fresh_state):
        state = step(fresh_state, 1.0, FlightControls(burner_delta=0.0, sandbag_delta=5))
        assert int(state.sandbags) == 6
        state = step(fresh_state, 1.0, FlightControls(burner_delta=0.0, sandbag_delta=-9))
        assert int(state.sandbags) == 0

    def test_burner_ramp(self, fresh_state):
        """A 3% flame burns fuel but loses to cooling, so the envelope stays at ambient."""
        state = step(fresh_state, 1.0, FlightControls(burner_delta=3.0, sandbag_delta=0))
        assert float(state.burner_power) == 3.0
        assert float(state.air_temperature) == 20.0
        assert float(state.fuel) < 100.0

    def test_strong_flame_outpaces_cooling(self, fresh_state):
        state = step(set_burner(fresh_state, 50.0), 1.0)
        assert float(state.air_temperature) == pytest.approx(20.0 + 0.4 - 0.15, rel=1e-6)

    def test_burner_cut_when_tank_empties(self, fresh_state):
        state = patch_state(fresh_state, fuel=0.02, burner_power=100.0)
        state = step(state, 1.0)
        assert float(state.fuel) == 0.0
        assert float(state.burner_power) == 0.0

    def test_long_stall_capped(self, airborne_state):
        capped = step(airborne_state, 10.0)
        reference = step(airborne_state, 3.0)
        assert trees_equal(capped, reference)

    def test_negative_dt_is_zero(self, airborne_state):
        frozen_time = step(airborne_state, -1.0)
        assert float(frozen_time.altitude) == 50.0
        assert float(frozen_time.flight_time) == 0.0
        assert int(frozen_time.tick) == 1

    def test_params_override(self, airborne_state, params):
        heavy = params.replace(gravity=0.5)
        state = step(airborne_state, 1.0, FlightControls(burner_delta=0.0, sandbag_delta=0), heavy)
        assert float(state.velocity) < -0.4

    def test_deterministic(self, fresh_state):
        controls = FlightControls(burner_delta=2.0, sandbag_delta=0)
        assert trees_equal(step(fresh_state, 1.3, controls), step(fresh_state, 1.3, controls))


class TestBounds:
    """Bounds that hold along any trajectory."""

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_random_inputs_stay_in_bounds(self, seed):
        rng = np.random.default_rng(seed)
        n = 1500
        dts = jnp.asarray(rng.uniform(0.0, 3.0, n), dtype=jnp.float32)
        controls = FlightControls(
            burner_delta=jnp.asarray(rng.choice([0.0, 3.0, 9.0, -5.0], n, p=[0.3, 0.5, 0.1, 0.1]), dtype=jnp.float32),
            sandbag_delta=jnp.asarray(rng.choice([-1, 0, 1], n, p=[0.02, 0.96, 0.02]), dtype=jnp.int32),
        )
        _, trajectory = rollout(create_state(), dts, controls)

        fuel = np.asarray(trajectory.fuel)
        burner = np.asarray(trajectory.burner_power)
        temperature = np.asarray(trajectory.air_temperature)
        altitude = np.asarray(trajectory.altitude)
        sandbags = np.asarray(trajectory.sandbags)

        assert np.all((fuel >= 0.0) & (fuel <= 100.0))
        assert np.all((burner >= 0.0) & (burner <= 100.0))
        assert np.all(burner[fuel == 0.0] == 0.0)
        assert np.all((temperature >= 20.0) & (temperature <= 200.0))
        assert np.all((altitude >= 0.0) & (altitude <= 800.0))
        assert np.all((sandbags >= 0) & (sandbags <= 6))
        assert np.all(np.diff(np.asarray(trajectory.score)) >= 0)
        assert np.all(np.diff(np.asarray(trajectory.max_altitude)) >= 0)
        assert np.all(np.diff(fuel) <= 0)

        # Once finished, every later state is the same state.
        over = np.asarray(trajectory.game_over)
        if over.any():
            first = int(np.argmax(over))
            assert trees_equal(index_state(trajectory, first), index_state(trajectory, n - 1))


class TestFrameDt:
    """Wall-clock to tick conversion."""

    def test_nominal_frame(self):
        assert frame_dt(16.67) == pytest.approx(1.0)

    def test_slow_frame(self):
        assert frame_dt(33.34) == pytest.approx(2.0)

    def test_stall_capped(self):
        assert frame_dt(5000.0) == 3.0

    def test_negative_elapsed(self):
        assert frame_dt(-10.0) == 0.0

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            frame_dt(16.67, frame_duration_ms=0.0)
        with pytest.raises(ValueError):
            frame_dt(16.67, max_dt=-1.0)


class TestRollout:
    """Scanned and batched rollouts."""

    def test_rollout_matches_steps(self, fresh_state):
        controls = constant_controls(5, burner_delta=3.0)
        final, trajectory = rollout(fresh_state, jnp.ones(5), controls)

        state = fresh_state
        for i in range(5):
            state = step(state, 1.0, FlightControls(burner_delta=3.0, sandbag_delta=0))
            assert_trees_close(index_state(trajectory, i), state)
        assert_trees_close(final, state)

    def test_trajectory_shapes(self, fresh_state):
        _, trajectory = rollout(fresh_state, jnp.ones(7), constant_controls(7))
        assert trajectory.altitude.shape == (7,)
        assert trajectory.popups.kind.shape == (7, 16)

    def test_progress_bar(self, fresh_state):
        final, _ = rollout(fresh_state, jnp.ones(10), constant_controls(10), progress=True, desc="test")
        assert int(final.tick) == 10

    def test_batch(self):
        states = stack_states([create_state(sandbags=0), create_state(sandbags=6)])
        states = jax.vmap(lambda s: set_burner(s, 100.0))(states)
        dts = jnp.ones((2, 400))
        controls = jax.tree.map(lambda x: jnp.stack([x, x]), constant_controls(400))

        final, trajectory = rollout_batch(states, dts, controls)
        assert final.altitude.shape == (2,)
        assert trajectory.altitude.shape == (2, 400)
        assert float(final.max_altitude[0]) > float(final.max_altitude[1])
