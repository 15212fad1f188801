"""
Gymnasium compatibility wrapper for the balloon environment.

Wraps ``BalloonEnv`` in the Gymnasium API while the simulation itself keeps
running through the jitted JAX step.
"""

from typing import Dict, Optional, Tuple

import jax
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from hotair.env import OBSERVATION_SIZE, BalloonEnv, make_env


class GymnasiumWrapper(gym.Env):
    """
    Gymnasium-compatible wrapper for ``BalloonEnv``.

    Example:
        ```python
        from hotair.env import make_env
        from hotair.gymnasium_wrapper import GymnasiumWrapper

        env, metadata = make_env()
        gym_env = GymnasiumWrapper(env)

        obs, info = gym_env.reset()
        obs, reward, terminated, truncated, info = gym_env.step(action)
        ```
    """

    def __init__(self, balloon_env: BalloonEnv, seed: Optional[int] = None):
        """
        Args:
            balloon_env: Environment to wrap
            seed: Optional seed for the reset key stream
        """
        self.balloon_env = balloon_env
        self._state = None
        self._rng_key = jax.random.PRNGKey(seed if seed is not None else 42)

        self.metadata = balloon_env.metadata.copy()
        self.action_space = spaces.Discrete(balloon_env.num_actions)
        self.observation_space = spaces.Box(
            low=-np.inf, high=np.inf, shape=(OBSERVATION_SIZE,), dtype=np.float32
        )
        self.spec = None

    def reset(self, seed: Optional[int] = None, options: Optional[Dict] = None) -> Tuple[np.ndarray, Dict]:
        """Start a new episode; returns (observation, info)."""
        if seed is not None:
            self._rng_key = jax.random.PRNGKey(seed)
        reset_key, self._rng_key = jax.random.split(self._rng_key)

        self._state, observation, info = self.balloon_env.reset(reset_key)

        observation = np.array(observation)
        info = {k: np.array(v) if hasattr(v, 'shape') else v for k, v in info.items()}
        return observation, info

    def step(self, action: int) -> Tuple[np.ndarray, float, bool, bool, Dict]:
        """Advance one step; returns (observation, reward, terminated, truncated, info)."""
        if self._state is None:
            raise RuntimeError("Must call reset() before step()")

        (self._state, observation, reward, terminated,
         truncated, info) = self.balloon_env.step(self._state, action)

        observation = np.array(observation)
        info = {k: np.array(v) if hasattr(v, 'shape') else v for k, v in info.items()}
        return observation, float(reward), bool(terminated), bool(truncated), info

    def close(self):
        pass

    @property
    def unwrapped(self):
        return self.balloon_env

    @property
    def state(self):
        return self._state


class VectorizedGymnasiumWrapper:
    """
    Batched wrapper running ``num_envs`` episodes in lockstep with ``jax.vmap``.
    """

    def __init__(self, balloon_env: BalloonEnv, num_envs: int, seed: Optional[int] = None):
        if num_envs <= 0:
            raise ValueError(f"num_envs must be positive, got {num_envs}")

        self.balloon_env = balloon_env
        self.num_envs = num_envs
        self._states = None

        base_key = jax.random.PRNGKey(seed if seed is not None else 42)
        self._rng_keys = jax.random.split(base_key, num_envs)

        single_wrapper = GymnasiumWrapper(balloon_env, seed=0)
        self.action_space = single_wrapper.action_space
        self.observation_space = single_wrapper.observation_space
        self.metadata = single_wrapper.metadata.copy()
        self.spec = None

        self._vmap_reset = jax.vmap(balloon_env.reset)
        self._vmap_step = jax.vmap(balloon_env.step)

    def reset(self, seed: Optional[int] = None, options: Optional[Dict] = None):
        """Reset all environments; returns (observations, {})."""
        if seed is not None:
            self._rng_keys = jax.random.split(jax.random.PRNGKey(seed), self.num_envs)

        self._states, observations, _ = self._vmap_reset(self._rng_keys)
        return np.array(observations), {}

    def step(self, actions):
        """Step all environments with one action each."""
        if self._states is None:
            raise RuntimeError("Must call reset() before step()")

        (self._states, observations, rewards,
         terminated, truncated, _) = self._vmap_step(self._states, np.asarray(actions))

        return (np.array(observations), np.array(rewards),
                np.array(terminated), np.array(truncated), {})

    def close(self):
        pass


def make_gymnasium_env(**kwargs) -> GymnasiumWrapper:
    """Create a Gymnasium-compatible balloon environment; kwargs go to ``BalloonEnv``."""
    balloon_env, _ = make_env(**kwargs)
    return GymnasiumWrapper(balloon_env)


def make_vectorized_env(num_envs: int, **kwargs) -> VectorizedGymnasiumWrapper:
    """Create a vectorized balloon environment; kwargs go to ``BalloonEnv``."""
    balloon_env, _ = make_env(**kwargs)
    return VectorizedGymnasiumWrapper(balloon_env, num_envs)
