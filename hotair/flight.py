"""Flight lifecycle: countdown, escape, ground contact and airborne transitions."""

import jax
import jax.lax
import jax.numpy as jnp

from hotair.state import FlightState, FlightParams, GameOverReason


ESCAPED = 0
CRASHED = 1
LANDED = 2
AIRBORNE = 3


def _over(state: FlightState, reason: GameOverReason) -> FlightState:
    return state.replace(
        game_over=jnp.ones_like(state.game_over),
        game_over_reason=jnp.full_like(state.game_over_reason, int(reason)),
    )


def tick_countdown(state: FlightState, dt: jnp.ndarray, params: FlightParams) -> jnp.ndarray:
    """Countdown after this tick; it only runs before the first liftoff."""
    return jnp.where(
        state.has_lifted_off,
        state.countdown,
        state.countdown - dt / params.ticks_per_second,
    )


def timed_out(state: FlightState, countdown: jnp.ndarray) -> jnp.ndarray:
    return ~state.has_lifted_off & (countdown <= 0)


def time_out(state: FlightState) -> FlightState:
    """Failed to launch before the countdown expired."""
    return _over(state.replace(countdown=jnp.zeros_like(state.countdown)), GameOverReason.TIMEOUT)


def transition_index(state: FlightState, params: FlightParams) -> jnp.ndarray:
    """Pick the transition for a post-motion state; first match wins.

    ``state.is_landed`` still holds the previous tick's value here, which is
    what separates a touchdown from resting on the ground.
    """
    escaped = state.altitude >= params.screen_max_altitude
    grounded = state.altitude <= params.ground_level
    crashed = grounded & ~state.is_landed & (jnp.abs(state.velocity) > params.safe_landing_speed)
    return jnp.where(escaped, ESCAPED, jnp.where(crashed, CRASHED, jnp.where(grounded, LANDED, AIRBORNE)))


def resolve_flight(state: FlightState, dt: jnp.ndarray, params: FlightParams) -> FlightState:
    """Apply escape, crash, landing or airborne bookkeeping to a moved state."""

    def track(state: FlightState) -> FlightState:
        return state.replace(
            max_altitude=jnp.maximum(state.max_altitude, state.altitude),
            flight_time=jnp.where(
                state.is_landed,
                state.flight_time,
                state.flight_time + dt / params.ticks_per_second,
            ),
        )

    def escape(state: FlightState) -> FlightState:
        ceiling = jnp.full_like(state.altitude, params.screen_max_altitude)
        state = state.replace(
            altitude=ceiling,
            velocity=jnp.zeros_like(state.velocity),
            burner_power=jnp.zeros_like(state.burner_power),
            is_landed=jnp.zeros_like(state.is_landed),
            has_lifted_off=jnp.ones_like(state.has_lifted_off),
            max_altitude=jnp.maximum(state.max_altitude, ceiling),
        )
        return _over(state, GameOverReason.TOO_HIGH)

    def crash(state: FlightState) -> FlightState:
        state = state.replace(
            altitude=jnp.zeros_like(state.altitude),
            velocity=jnp.zeros_like(state.velocity),
            burner_power=jnp.zeros_like(state.burner_power),
            is_landed=jnp.ones_like(state.is_landed),
        )
        return _over(state, GameOverReason.CRASH)

    def land(state: FlightState) -> FlightState:
        state = state.replace(
            altitude=jnp.full_like(state.altitude, params.ground_level),
            velocity=jnp.zeros_like(state.velocity),
            is_landed=jnp.ones_like(state.is_landed),
        )
        return track(state)

    def fly(state: FlightState) -> FlightState:
        state = state.replace(
            is_landed=jnp.zeros_like(state.is_landed),
            has_lifted_off=jnp.ones_like(state.has_lifted_off),
        )
        return track(state)

    return jax.lax.switch(transition_index(state, params), [escape, crash, land, fly], state)
