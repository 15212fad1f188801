"""Test configuration and fixtures for the balloon simulation tests."""

import jax
import jax.numpy as jnp
import numpy as np
import pytest

from hotair import create_state, DEFAULT_PARAMS


@pytest.fixture
def fresh_state():
    """Provide a fresh episode for each test."""
    return create_state()


@pytest.fixture
def airborne_state():
    """Provide a balloon in flight at 50 m with the envelope at ambient."""
    return patch_state(
        create_state(),
        altitude=50.0,
        is_landed=False,
        has_lifted_off=True,
    )


@pytest.fixture
def params():
    return DEFAULT_PARAMS


def patch_state(state, **fields):
    """Replace fields, keeping each field's dtype."""
    return state.replace(**{
        name: jnp.asarray(value, dtype=getattr(state, name).dtype)
        for name, value in fields.items()
    })


def index_state(trajectory, i):
    """Pick the state after tick ``i`` out of a stacked rollout trajectory."""
    return jax.tree.map(lambda x: x[i], trajectory)


def trees_equal(a, b) -> bool:
    """Bitwise equality of every leaf, dtypes included."""
    leaves = jax.tree.leaves(jax.tree.map(
        lambda x, y: x.dtype == y.dtype and np.array_equal(np.asarray(x), np.asarray(y)), a, b
    ))
    return all(leaves)
