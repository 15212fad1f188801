"""Per-tick simulation step and immediate-apply player actions."""

import jax
import jax.lax
import jax.numpy as jnp

from hotair import constants as C
from hotair.state import DEFAULT_PARAMS, FlightControls, FlightParams, FlightState, create_state
from hotair.thermal import update_temperature, cut_burner_without_fuel, ramp_burner
from hotair.forces import integrate_motion
from hotair.flight import tick_countdown, timed_out, time_out, resolve_flight
from hotair.scoring import score_tick


NO_INPUT = FlightControls()


def frame_dt(
    elapsed_ms: float,
    frame_duration_ms: float = C.FRAME_DURATION_MS,
    max_dt: float = C.MAX_FRAME_DT,
) -> float:
    """Convert wall-clock milliseconds since the last frame to a tick multiplier.

    Args:
        elapsed_ms: Real time elapsed since the previous frame
        frame_duration_ms: Nominal frame duration (60 Hz by default)
        max_dt: Cap applied after long stalls such as a backgrounded window

    Returns:
        ``dt`` in ``[0, max_dt]``, 1.0 at the nominal frame rate
    """
    if frame_duration_ms <= 0:
        raise ValueError(f"frame_duration_ms must be positive, got {frame_duration_ms}")
    if max_dt < 0:
        raise ValueError(f"max_dt must be non-negative, got {max_dt}")
    return min(max(elapsed_ms, 0.0) / frame_duration_ms, max_dt)


def _fly(state: FlightState, dt: jnp.ndarray, controls: FlightControls, params: FlightParams) -> FlightState:
    burner_power = ramp_burner(state.burner_power, state.fuel, controls.burner_delta)
    air_temperature, fuel = update_temperature(state.air_temperature, burner_power, state.fuel, dt, params)
    burner_power = cut_burner_without_fuel(burner_power, fuel)
    altitude, velocity = integrate_motion(state.altitude, state.velocity, air_temperature, state.sandbags, dt, params)

    state = resolve_flight(
        state.replace(
            altitude=altitude,
            velocity=velocity,
            air_temperature=air_temperature,
            burner_power=burner_power,
            fuel=fuel,
        ),
        dt,
        params,
    )
    return jax.lax.cond(state.game_over, lambda s: s, lambda s: score_tick(s, dt, params), state)


def _advance(state: FlightState, dt: jnp.ndarray, controls: FlightControls, params: FlightParams) -> FlightState:
    sandbags = jnp.clip(state.sandbags + controls.sandbag_delta, 0, state.max_sandbags)
    state = state.replace(sandbags=sandbags.astype(state.sandbags.dtype))

    countdown = tick_countdown(state, dt, params)
    state = jax.lax.cond(
        timed_out(state, countdown),
        time_out,
        lambda s: _fly(s.replace(countdown=countdown), dt, controls, params),
        state,
    )
    return state.replace(tick=state.tick + 1)


@jax.jit
def step(
    prev: FlightState,
    dt: float | jnp.ndarray,
    controls: FlightControls = NO_INPUT,
    params: FlightParams = DEFAULT_PARAMS,
) -> FlightState:
    """Advance one tick.

    Args:
        prev: State after the previous tick
        dt: Elapsed frames, 1.0 at the nominal rate; clipped to [0, MAX_FRAME_DT]
        controls: Burner ramp and ballast change for this tick
        params: Tuning constants

    Returns:
        The next state. A finished episode is returned unchanged.
    """
    dt = jnp.clip(jnp.asarray(dt, dtype=jnp.float32), 0.0, C.MAX_FRAME_DT)
    return jax.lax.cond(
        prev.game_over,
        lambda s: s,
        lambda s: _advance(s, dt, controls, params),
        prev,
    )


def set_burner(state: FlightState, value: float | jnp.ndarray) -> FlightState:
    """Set burner power directly (slider); ignored once over or out of fuel."""
    allowed = ~state.game_over & (state.fuel > 0)
    value = jnp.clip(jnp.asarray(value, dtype=state.burner_power.dtype), 0.0, 100.0)
    return state.replace(burner_power=jnp.where(allowed, value, state.burner_power))


def add_sandbag(state: FlightState) -> FlightState:
    """Load one sandbag; only possible on the ground with room to spare."""
    allowed = state.is_landed & ~state.game_over & (state.sandbags < state.max_sandbags)
    return state.replace(sandbags=state.sandbags + allowed.astype(state.sandbags.dtype))


def drop_sandbag(state: FlightState) -> FlightState:
    """Drop one sandbag, in flight or on the ground."""
    allowed = ~state.game_over & (state.sandbags > 0)
    return state.replace(sandbags=state.sandbags - allowed.astype(state.sandbags.dtype))


def reset(sandbags: int = C.DEFAULT_SANDBAGS, max_sandbags: int = C.DEFAULT_MAX_SANDBAGS,
          params: FlightParams = DEFAULT_PARAMS) -> FlightState:
    """Discard the episode and start a fresh one."""
    return create_state(sandbags, max_sandbags, params)
