"""Score awards and transient popups."""

import jax.numpy as jnp

from hotair import constants as C
from hotair.state import DEFAULT_PARAMS, FlightState, FlightParams, PopupBuffer


def popup_text(kind: int, params: FlightParams) -> str:
    """Display text for a popup kind."""
    if kind == C.POPUP_TIME:
        return f"+{params.time_score_points}"
    if kind == C.POPUP_MOUNTAIN:
        return f"+{params.mountain_cross_score} Peak!"
    if kind == C.POPUP_MIDDLE:
        return f"+{params.middle_cross_score} Mid!"
    raise ValueError(f"Unknown popup kind {kind}")


def prune_popups(popups: PopupBuffer, tick: jnp.ndarray, window: int) -> PopupBuffer:
    """Drop popups emitted more than ``window`` ticks before ``tick``."""
    return popups.replace(active=popups.active & (tick - popups.tick <= window))


def push_popup(popups: PopupBuffer, kind: int, tick: jnp.ndarray, enabled: jnp.ndarray) -> PopupBuffer:
    """Write a popup into the next ring slot when ``enabled``."""
    slot = popups.head % popups.kind.shape[0]
    return popups.replace(
        kind=jnp.where(enabled, popups.kind.at[slot].set(kind), popups.kind),
        tick=jnp.where(enabled, popups.tick.at[slot].set(tick), popups.tick),
        active=jnp.where(enabled, popups.active.at[slot].set(True), popups.active),
        head=popups.head + enabled.astype(popups.head.dtype),
    )


def score_tick(state: FlightState, dt: jnp.ndarray, params: FlightParams) -> FlightState:
    """Award time and line-crossing points for a live, post-motion state.

    Line bonuses compare the current at-or-above predicate with its latch,
    so they fire on downward crossings as well as upward ones.
    """
    tick = state.tick
    popups = prune_popups(state.popups, tick, params.popup_window_ticks)
    score = state.score
    airborne = ~state.is_landed

    accum = jnp.where(airborne, state.flight_score_accum + dt / params.ticks_per_second, state.flight_score_accum)
    time_award = airborne & (accum >= params.time_score_interval)
    accum = jnp.where(time_award, accum - params.time_score_interval, accum)
    score = score + jnp.where(time_award, params.time_score_points, 0)
    popups = push_popup(popups, C.POPUP_TIME, tick, time_award)

    above_mountain = state.altitude >= params.mountain_line_altitude
    mountain_cross = (above_mountain != state.was_above_mountain_line) & state.has_lifted_off
    score = score + jnp.where(mountain_cross, params.mountain_cross_score, 0)
    popups = push_popup(popups, C.POPUP_MOUNTAIN, tick, mountain_cross)

    above_middle = state.altitude >= params.middle_line_altitude
    middle_cross = (above_middle != state.was_above_middle_line) & state.has_lifted_off
    score = score + jnp.where(middle_cross, params.middle_cross_score, 0)
    popups = push_popup(popups, C.POPUP_MIDDLE, tick, middle_cross)

    return state.replace(
        score=score.astype(state.score.dtype),
        flight_score_accum=accum,
        was_above_mountain_line=jnp.where(mountain_cross, above_mountain, state.was_above_mountain_line),
        was_above_middle_line=jnp.where(middle_cross, above_middle, state.was_above_middle_line),
        popups=popups,
    )


def popup_messages(state: FlightState, params: FlightParams = DEFAULT_PARAMS) -> list[tuple[str, int]]:
    """Live popups as ``(text, emitted_tick)``, oldest first."""
    popups = state.popups
    capacity = popups.kind.shape[0]
    head = int(popups.head)
    messages = []
    for offset in range(capacity):
        slot = (head + offset) % capacity
        if bool(popups.active[slot]):
            messages.append((popup_text(int(popups.kind[slot]), params), int(popups.tick[slot])))
    return messages
