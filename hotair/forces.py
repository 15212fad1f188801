"""Vertical motion under buoyancy, gravity, ballast and drag."""

import jax.numpy as jnp

from hotair.state import FlightParams


def net_acceleration(
    air_temperature: jnp.ndarray,
    sandbags: jnp.ndarray,
    dt: jnp.ndarray,
    params: FlightParams,
) -> jnp.ndarray:
    """Velocity change for one tick before drag: buoyancy - gravity - ballast."""
    buoyancy = (air_temperature - params.ambient_temp) * params.buoyancy_factor * dt
    gravity = params.gravity * dt
    ballast = sandbags * params.sandbag_weight * dt
    return buoyancy - gravity - ballast


def integrate_motion(
    altitude: jnp.ndarray,
    velocity: jnp.ndarray,
    air_temperature: jnp.ndarray,
    sandbags: jnp.ndarray,
    dt: jnp.ndarray,
    params: FlightParams,
) -> tuple[jnp.ndarray, jnp.ndarray]:
    """Semi-implicit Euler step.

    Forces update velocity, drag decays it, and only then does the position
    move. The tuning constants assume exactly this order.
    """
    velocity = velocity + net_acceleration(air_temperature, sandbags, dt, params)
    velocity = velocity * jnp.power(params.drag, dt)
    altitude = altitude + velocity * dt
    return altitude, velocity
