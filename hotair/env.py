from functools import partial

import jax
import jax.numpy as jnp

from hotair import constants as C
from hotair.simulation import add_sandbag, drop_sandbag, step
from hotair.state import DEFAULT_PARAMS, FlightControls, FlightParams, FlightState, create_state


BURN = 0
DROP_SANDBAG = 1
ADD_SANDBAG = 2

OBSERVATION_SIZE = 8


class BalloonEnv:
    """JAX-compatible balloon environment for reinforcement learning.

    Provides a Gym-style interface over the flight simulation with JIT
    compiled ``reset`` and ``step``. Actions are discrete: hold the burner,
    drop a sandbag, load a sandbag, or do nothing (always the last index).
    The reward is the score gained during the step.
    """

    metadata = {"render_modes": [], "render_fps": 60}

    def __init__(
        self,
        max_num_steps_per_episodes: int = 3600,
        ticks_per_step: int = 1,
        dt: float = 1.0,
        sandbags: int = C.DEFAULT_SANDBAGS,
        max_sandbags: int = C.DEFAULT_MAX_SANDBAGS,
        params: FlightParams = DEFAULT_PARAMS,
        action_set=None,
    ):
        """Initialize the balloon RL environment.

        Args:
            max_num_steps_per_episodes: Maximum steps before episode truncation
            ticks_per_step: Simulation ticks run per environment step, repeating the burner input
            dt: Tick multiplier used for every tick (1.0 = nominal 60 Hz frame)
            sandbags: Sandbags loaded at reset
            max_sandbags: Ballast capacity
            params: Tuning constants
            action_set: Subset of (BURN, DROP_SANDBAG, ADD_SANDBAG). If None, uses all three
        """
        if max_num_steps_per_episodes <= 0:
            raise ValueError(f"max_num_steps_per_episodes must be positive, got {max_num_steps_per_episodes}")
        if ticks_per_step <= 0:
            raise ValueError(f"ticks_per_step must be positive, got {ticks_per_step}")
        if not 0 <= dt <= C.MAX_FRAME_DT:
            raise ValueError(f"dt={dt} is out of range [0, {C.MAX_FRAME_DT}]")

        # Fails early on invalid ballast
        create_state(sandbags, max_sandbags, params)

        self.max_num_steps_per_episodes = max_num_steps_per_episodes
        self.ticks_per_step = ticks_per_step
        self.dt = dt
        self.sandbags = sandbags
        self.max_sandbags = max_sandbags
        self.params = params

        if action_set is None:
            action_set = (BURN, DROP_SANDBAG, ADD_SANDBAG)
        self.action_set = jnp.array(action_set)

    def from_minutes(self, minutes: float):
        """Set episode length based on desired flight duration.

        Args:
            minutes: Desired episode length in simulated minutes
        """
        ticks = minutes * 60 * C.TICKS_PER_SECOND / self.dt
        self.max_num_steps_per_episodes = int(ticks) // self.ticks_per_step

    def observation(self, state: FlightState) -> jnp.ndarray:
        """Normalised feature vector for a state."""
        p = self.params
        return jnp.array([
            state.altitude / p.screen_max_altitude,
            state.velocity,
            (state.air_temperature - p.ambient_temp) / (p.max_temp - p.ambient_temp),
            state.burner_power / 100.0,
            state.fuel / p.max_fuel,
            state.sandbags / jnp.maximum(state.max_sandbags, 1),
            state.countdown / p.countdown_seconds,
            state.is_landed.astype(jnp.float32),
        ], dtype=jnp.float32)

    @partial(jax.jit, static_argnums=0)
    def reset(self, rng: jax.random.PRNGKey):
        """Reset the environment to a fresh episode.

        Episode starts are deterministic; ``rng`` is accepted so the
        signature matches other JAX environments.

        Returns:
            Tuple of:
                - state: Initial FlightState
                - observation: Initial observation vector
                - info: Dictionary with initial score
        """
        del rng
        state = create_state(self.sandbags, self.max_sandbags, self.params)
        return state, self.observation(state), {"score": state.score}

    @partial(jax.jit, static_argnums=0)
    def step(self, state: FlightState, action: int | jnp.ndarray):
        """Execute one environment step.

        Args:
            state: Current flight state
            action: Action index (0 to len(action_set)-1 for actions, len(action_set) for no-op)

        Returns:
            Tuple of:
                - next_state: Updated flight state
                - observation: Observation vector
                - reward: Score gained during the step
                - terminated: Whether the episode reached a terminal outcome
                - truncated: Whether the step limit was reached
                - info: Dictionary with current score and outcome code
        """
        is_noop = action == (self.num_actions - 1)
        chosen = jnp.where(is_noop, -1, self.action_set[jnp.minimum(action, len(self.action_set) - 1)])

        state = jax.lax.cond(chosen == DROP_SANDBAG, drop_sandbag, lambda s: s, state)
        state = jax.lax.cond(chosen == ADD_SANDBAG, add_sandbag, lambda s: s, state)

        controls = FlightControls(
            burner_delta=jnp.where(chosen == BURN, C.BURNER_RAMP_RATE * self.dt, 0.0),
            sandbag_delta=0,
        )

        def run_tick(s, _):
            return step(s, self.dt, controls, self.params), None

        final_state, _ = jax.lax.scan(run_tick, state, length=self.ticks_per_step)

        reward = (final_state.score - state.score) * 1.0
        terminated = final_state.game_over
        truncated = final_state.tick >= self.max_num_steps_per_episodes * self.ticks_per_step

        return final_state, self.observation(final_state), reward, terminated, truncated, {
            "score": final_state.score,
            "game_over_reason": final_state.game_over_reason,
        }

    @property
    def num_actions(self) -> int:
        """Number of actions (length of action_set + 1 for no-op)."""
        return len(self.action_set) + 1


def make_env(**kwargs) -> tuple[BalloonEnv, dict]:
    """Create an environment with its metadata."""
    env = BalloonEnv(**kwargs)
    metadata = {
        "title": "Hot Air Balloon",
        "description": "Keep a hot-air balloon aloft with burner and ballast; "
                       "score by flying and crossing altitude lines.",
        "num_actions": env.num_actions,
        "observation_size": OBSERVATION_SIZE,
    }
    return env, metadata
