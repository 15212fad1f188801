"""Saving and restoring flight states."""

from typing import Any, Dict, Optional

import jax
import jax.numpy as jnp
from flax import serialization

from hotair.state import FlightState, create_state


def state_to_bytes(state: FlightState) -> bytes:
    """Serialize a state to msgpack bytes; dtypes and bits are preserved."""
    return serialization.to_bytes(state)


def state_from_bytes(data: bytes, template: Optional[FlightState] = None) -> FlightState:
    """Restore a state written by ``state_to_bytes``.

    Args:
        data: msgpack payload
        template: State with the target structure; a fresh episode by default

    Returns:
        FlightState backed by JAX arrays
    """
    template = create_state() if template is None else template
    restored = serialization.from_bytes(template, data)
    return jax.tree.map(jnp.asarray, restored)


def state_to_dict(state: FlightState) -> Dict[str, Any]:
    """Plain nested dict of Python scalars and lists, suitable for JSON."""
    return jax.tree.map(lambda x: x.tolist(), serialization.to_state_dict(jax.device_get(state)))


def state_from_dict(data: Dict[str, Any], template: Optional[FlightState] = None) -> FlightState:
    """Inverse of ``state_to_dict``; values are cast back to the template dtypes."""
    template = create_state() if template is None else template
    restored = serialization.from_state_dict(template, data)
    return jax.tree.map(lambda ref, value: jnp.asarray(value, dtype=ref.dtype), template, restored)
