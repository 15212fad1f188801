"""Envelope air temperature and burner fuel."""

import jax.numpy as jnp

from hotair.state import FlightParams


def update_temperature(
    air_temperature: jnp.ndarray,
    burner_power: jnp.ndarray,
    fuel: jnp.ndarray,
    dt: jnp.ndarray,
    params: FlightParams,
) -> tuple[jnp.ndarray, jnp.ndarray]:
    """Heat from the burner, then cool toward ambient.

    Heating and fuel burn scale with burner power and only happen while
    there is fuel left. Cooling applies every tick. The result stays within
    ``[ambient_temp, max_temp]`` and fuel never drops below zero.
    """
    throttle = burner_power / 100.0
    burning = (burner_power > 0) & (fuel > 0)

    heated = jnp.minimum(params.max_temp, air_temperature + params.burner_heat_rate * throttle * dt)
    burned = jnp.maximum(0.0, fuel - params.fuel_consumption_rate * throttle * dt)
    air_temperature = jnp.where(burning, heated, air_temperature)
    fuel = jnp.where(burning, burned, fuel)

    air_temperature = jnp.maximum(params.ambient_temp, air_temperature - params.air_cooling_rate * dt)
    return air_temperature, fuel


def cut_burner_without_fuel(burner_power: jnp.ndarray, fuel: jnp.ndarray) -> jnp.ndarray:
    """Burner power is zero once the tank is empty."""
    return jnp.where(fuel <= 0, jnp.zeros_like(burner_power), burner_power)


def ramp_burner(burner_power: jnp.ndarray, fuel: jnp.ndarray, delta: jnp.ndarray) -> jnp.ndarray:
    """Apply the analog burner input, clamped to [0, 100], while fuel remains."""
    ramped = jnp.clip(burner_power + delta, 0.0, 100.0)
    return jnp.where(fuel > 0, ramped, burner_power)
