"""Balloon flight state structures."""

import enum
from dataclasses import field

import jax.numpy as jnp
from chex import dataclass as chex_dataclass
from flax.struct import dataclass, PyTreeNode

from hotair import constants as C


class GameOverReason(enum.IntEnum):
    """Terminal outcome codes stored in ``FlightState.game_over_reason``."""
    NONE = 0
    CRASH = 1
    TOO_HIGH = 2
    TIMEOUT = 3

    @property
    def label(self):
        return {
            GameOverReason.NONE: "none",
            GameOverReason.CRASH: "crash",
            GameOverReason.TOO_HIGH: "too_high",
            GameOverReason.TIMEOUT: "timeout",
        }[self]


@dataclass(frozen=True)
class FlightParams:
    """Tunable simulation constants.

    Every field is a pytree leaf, so a batch of parameter sets can be
    vmapped through ``step`` alongside a batch of states.
    """
    gravity: float = C.GRAVITY
    buoyancy_factor: float = C.BUOYANCY_FACTOR
    drag: float = C.DRAG
    air_cooling_rate: float = C.AIR_COOLING_RATE
    burner_heat_rate: float = C.BURNER_HEAT_RATE
    ambient_temp: float = C.AMBIENT_TEMP
    max_temp: float = C.MAX_TEMP
    fuel_consumption_rate: float = C.FUEL_CONSUMPTION_RATE
    max_fuel: float = C.MAX_FUEL
    sandbag_weight: float = C.SANDBAG_WEIGHT
    screen_max_altitude: float = C.SCREEN_MAX_ALTITUDE
    safe_landing_speed: float = C.SAFE_LANDING_SPEED
    ground_level: float = C.GROUND_LEVEL
    countdown_seconds: float = C.COUNTDOWN_SECONDS
    mountain_line_altitude: float = C.MOUNTAIN_LINE_ALTITUDE
    middle_line_altitude: float = C.MIDDLE_LINE_ALTITUDE
    time_score_points: int = C.TIME_SCORE_POINTS
    time_score_interval: float = C.TIME_SCORE_INTERVAL
    mountain_cross_score: int = C.MOUNTAIN_CROSS_SCORE
    middle_cross_score: int = C.MIDDLE_CROSS_SCORE
    popup_window_ticks: int = C.POPUP_WINDOW_TICKS
    ticks_per_second: float = C.TICKS_PER_SECOND


DEFAULT_PARAMS = FlightParams()


@dataclass(frozen=True)
class PopupBuffer:
    """Fixed-capacity ring of score popups, oldest overwritten first."""
    kind: jnp.ndarray = field(default_factory=lambda: jnp.zeros(C.POPUP_CAPACITY, dtype=jnp.int32))
    tick: jnp.ndarray = field(default_factory=lambda: jnp.zeros(C.POPUP_CAPACITY, dtype=jnp.int32))
    active: jnp.ndarray = field(default_factory=lambda: jnp.zeros(C.POPUP_CAPACITY, dtype=jnp.bool_))
    head: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))


@chex_dataclass(frozen=True)
class FlightControls:
    """Per-tick input snapshot built by the host."""
    burner_delta: float = 0.0  # added to burner power this tick
    sandbag_delta: int = 0     # -1, 0 or +1


class FlightState(PyTreeNode):
    """Complete state of one episode; replaced wholesale every tick."""
    altitude: jnp.ndarray
    velocity: jnp.ndarray
    air_temperature: jnp.ndarray
    burner_power: jnp.ndarray
    fuel: jnp.ndarray
    sandbags: jnp.ndarray
    max_sandbags: jnp.ndarray
    is_landed: jnp.ndarray
    game_over: jnp.ndarray
    game_over_reason: jnp.ndarray
    max_altitude: jnp.ndarray
    flight_time: jnp.ndarray
    countdown: jnp.ndarray
    has_lifted_off: jnp.ndarray
    score: jnp.ndarray
    flight_score_accum: jnp.ndarray
    was_above_mountain_line: jnp.ndarray
    was_above_middle_line: jnp.ndarray
    popups: PopupBuffer
    tick: jnp.ndarray

    @property
    def reason(self) -> GameOverReason:
        return GameOverReason(int(self.game_over_reason))


def create_state(
    sandbags: int = C.DEFAULT_SANDBAGS,
    max_sandbags: int = C.DEFAULT_MAX_SANDBAGS,
    params: FlightParams = DEFAULT_PARAMS,
) -> FlightState:
    """Create a fresh episode: on the ground, countdown running, full tank."""
    if max_sandbags < 0:
        raise ValueError(f"max_sandbags must be non-negative, got {max_sandbags}")
    if not 0 <= sandbags <= max_sandbags:
        raise ValueError(f"sandbags={sandbags} is out of range [0, {max_sandbags}]")

    def real(value):
        return jnp.asarray(value, dtype=jnp.float32)

    def integer(value):
        return jnp.asarray(value, dtype=jnp.int32)

    def flag(value):
        return jnp.asarray(value, dtype=jnp.bool_)

    return FlightState(
        altitude=real(params.ground_level),
        velocity=real(0.0),
        air_temperature=real(params.ambient_temp),
        burner_power=real(0.0),
        fuel=real(params.max_fuel),
        sandbags=integer(sandbags),
        max_sandbags=integer(max_sandbags),
        is_landed=flag(True),
        game_over=flag(False),
        game_over_reason=integer(GameOverReason.NONE),
        max_altitude=real(0.0),
        flight_time=real(0.0),
        countdown=real(params.countdown_seconds),
        has_lifted_off=flag(False),
        score=integer(0),
        flight_score_accum=real(0.0),
        was_above_mountain_line=flag(False),
        was_above_middle_line=flag(False),
        popups=PopupBuffer(),
        tick=integer(0),
    )
