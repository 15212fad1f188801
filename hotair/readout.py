"""Display-ready values derived from a flight state.

Nothing here draws; it computes what a HUD or overlay would show so every
front end presents the same numbers and messages.
"""

import dataclasses
from typing import Optional

from hotair import constants as C
from hotair.state import DEFAULT_PARAMS, FlightParams, FlightState, GameOverReason
from hotair.scoring import popup_messages


OUTCOME_MESSAGES = {
    GameOverReason.CRASH: ("Crash Landing!", "You descended too fast."),
    GameOverReason.TOO_HIGH: ("Lost in the Stratosphere!", "You flew too high and escaped the screen."),
    GameOverReason.TIMEOUT: ("Failed to Launch!", "The countdown ran out before takeoff."),
}


@dataclasses.dataclass(frozen=True)
class FlightReadout:
    """Snapshot of everything a HUD shows for one state."""
    altitude: int
    altitude_fraction: float
    climb: str
    speed: float
    air_temperature: int
    flight_time: int
    countdown: float
    burner_power: int
    burner_active: bool
    fuel: int
    fuel_level: str
    sandbags: int
    max_sandbags: int
    can_add_sandbag: bool
    can_drop_sandbag: bool
    score: int
    best_score: int
    popups: list
    outcome_title: Optional[str]
    outcome_message: Optional[str]
    safe_landing: bool
    max_altitude: int


def climb_direction(velocity: float) -> str:
    if velocity > C.CLIMB_DEADBAND:
        return "up"
    if velocity < -C.CLIMB_DEADBAND:
        return "down"
    return "stable"


def fuel_level(fuel: float) -> str:
    if fuel > C.FUEL_LOW:
        return "ok"
    if fuel > C.FUEL_CRITICAL:
        return "low"
    return "critical"


def read_state(state: FlightState, best_score: int = 0, params: FlightParams = DEFAULT_PARAMS) -> FlightReadout:
    """Build the readout for ``state``; ``best_score`` comes from the host."""
    velocity = float(state.velocity)
    altitude = float(state.altitude)
    fuel = float(state.fuel)
    burner_power = float(state.burner_power)
    score = int(state.score)
    game_over = bool(state.game_over)
    is_landed = bool(state.is_landed)
    sandbags = int(state.sandbags)
    max_sandbags = int(state.max_sandbags)
    max_altitude = float(state.max_altitude)

    title, message = OUTCOME_MESSAGES.get(state.reason, (None, None)) if game_over else (None, None)

    return FlightReadout(
        altitude=round(altitude),
        altitude_fraction=min(altitude / params.screen_max_altitude, 1.0),
        climb=climb_direction(velocity),
        speed=round(abs(velocity * C.SPEED_DISPLAY_SCALE), 1),
        air_temperature=round(float(state.air_temperature)),
        flight_time=round(float(state.flight_time)),
        countdown=float(state.countdown),
        burner_power=round(burner_power),
        burner_active=burner_power > 0 and fuel > 0,
        fuel=round(fuel),
        fuel_level=fuel_level(fuel),
        sandbags=sandbags,
        max_sandbags=max_sandbags,
        can_add_sandbag=is_landed and not game_over and sandbags < max_sandbags,
        can_drop_sandbag=not game_over and sandbags > 0,
        score=score,
        best_score=max(best_score, score),
        popups=popup_messages(state, params),
        outcome_title=title,
        outcome_message=message,
        safe_landing=(
            is_landed and not game_over and bool(state.has_lifted_off)
            and max_altitude > C.SAFE_LANDING_SUMMARY_ALTITUDE
        ),
        max_altitude=round(max_altitude),
    )
