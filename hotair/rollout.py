"""Multi-tick rollouts of the simulation step."""

from functools import partial
from typing import Optional, Sequence

import jax
import jax.numpy as jnp

from hotair.logging import scan_with_progress
from hotair.simulation import step
from hotair.state import DEFAULT_PARAMS, FlightControls, FlightParams, FlightState


def constant_controls(n: int, burner_delta: float = 0.0, sandbag_delta: int = 0) -> FlightControls:
    """The same input repeated for ``n`` ticks."""
    return FlightControls(
        burner_delta=jnp.full((n,), burner_delta, dtype=jnp.float32),
        sandbag_delta=jnp.full((n,), sandbag_delta, dtype=jnp.int32),
    )


def stack_states(states: Sequence[FlightState]) -> FlightState:
    """Stack states into one batched state for ``rollout_batch``."""
    return jax.tree.map(lambda *xs: jnp.stack(xs), *states)


@partial(jax.jit, static_argnames=("progress", "desc"))
def rollout(
    state: FlightState,
    dts: jnp.ndarray,
    controls: FlightControls,
    params: FlightParams = DEFAULT_PARAMS,
    progress: bool = False,
    desc: Optional[str] = None,
) -> tuple[FlightState, FlightState]:
    """Run ``len(dts)`` ticks.

    Args:
        state: Starting state
        dts: Per-tick ``dt`` values, shape (n,)
        controls: Per-tick inputs with leaves of shape (n,)
        params: Tuning constants
        progress: Show a tqdm progress bar while the scan runs
        desc: Progress bar label

    Returns:
        Tuple of:
            - final: State after the last tick
            - trajectory: Stacked states, ``trajectory[i]`` is the state after tick ``i``
    """
    n = dts.shape[0]

    def tick(state, x):
        _, dt, tick_controls = x
        state = step(state, dt, tick_controls, params)
        return state, state

    if progress:
        tick = scan_with_progress(n, desc=desc)(tick)

    return jax.lax.scan(tick, state, (jnp.arange(n), dts, controls))


def rollout_batch(
    states: FlightState,
    dts: jnp.ndarray,
    controls: FlightControls,
    params: FlightParams = DEFAULT_PARAMS,
) -> tuple[FlightState, FlightState]:
    """Vectorised ``rollout`` over a leading batch axis of states, dts and controls."""
    return jax.vmap(lambda s, d, c: rollout(s, d, c, params))(states, dts, controls)
