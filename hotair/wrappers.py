from typing import Tuple, Dict, Any
import jax
import jax.numpy as jnp

from flax.struct import dataclass
from gymnax.environments.environment import Environment, EnvParams
from gymnax.environments.spaces import Discrete, Box

from hotair.env import OBSERVATION_SIZE, BalloonEnv
from hotair.state import FlightState


@dataclass
class BalloonEnvParams(EnvParams):
    """Gymnax-compatible parameters for the balloon environment."""
    max_steps_in_episode: int = 3600


class BalloonGymnaxWrapper(Environment[FlightState, BalloonEnvParams]):
    """Gymnax wrapper for BalloonEnv."""

    def __init__(self, balloon_env: BalloonEnv):
        """Initialize wrapper with a BalloonEnv instance.

        Args:
            balloon_env: Configured BalloonEnv instance
        """
        self._balloon_env = balloon_env

    @property
    def default_params(self) -> BalloonEnvParams:
        return BalloonEnvParams(
            max_steps_in_episode=self._balloon_env.max_num_steps_per_episodes
        )

    def step_env(
            self,
            key: jax.Array,
            state: FlightState,
            action: int,
            params: BalloonEnvParams,
    ) -> Tuple[jax.Array, FlightState, jax.Array, jax.Array, Dict[Any, Any]]:
        """Execute one environment step."""
        next_state, obs, reward, terminated, truncated, info = self._balloon_env.step(state, action)
        done = terminated | truncated | self.is_truncated(next_state, params)
        return obs, next_state, reward, done, info

    def reset_env(
            self,
            key: jax.Array,
            params: BalloonEnvParams
    ) -> Tuple[jax.Array, FlightState]:
        """Reset environment to initial state."""
        state, obs, info = self._balloon_env.reset(key)
        return obs, state

    def is_terminal(self, state: FlightState, params: BalloonEnvParams) -> jax.Array:
        return state.game_over

    def is_truncated(self, state: FlightState, params: BalloonEnvParams) -> jax.Array:
        """Step limit reached; ``state.tick`` counts simulation ticks, not env steps."""
        return state.tick >= params.max_steps_in_episode * self._balloon_env.ticks_per_step

    @property
    def name(self) -> str:
        return "HotAirBalloon"

    @property
    def num_actions(self) -> int:
        return self._balloon_env.num_actions

    def action_space(self, params: BalloonEnvParams) -> Discrete:
        return Discrete(self.num_actions)

    def observation_space(self, params: BalloonEnvParams) -> Box:
        return Box(
            low=-jnp.inf,
            high=jnp.inf,
            shape=(OBSERVATION_SIZE,),
            dtype=jnp.float32
        )
