"""Hot-air balloon flight simulation package."""

from hotair.state import (
    DEFAULT_PARAMS,
    FlightControls,
    FlightParams,
    FlightState,
    GameOverReason,
    PopupBuffer,
    create_state,
)
from hotair.simulation import step, frame_dt, set_burner, add_sandbag, drop_sandbag, reset
from hotair.scoring import popup_messages
from hotair.serialization import state_to_bytes, state_from_bytes, state_to_dict, state_from_dict
from hotair.rollout import rollout, rollout_batch, constant_controls, stack_states
from hotair.constants import *

__all__ = [
    "FlightState",
    "FlightControls",
    "FlightParams",
    "DEFAULT_PARAMS",
    "GameOverReason",
    "PopupBuffer",
    "create_state",
    "step",
    "frame_dt",
    "set_burner",
    "add_sandbag",
    "drop_sandbag",
    "reset",
    "popup_messages",
    "state_to_bytes",
    "state_from_bytes",
    "state_to_dict",
    "state_from_dict",
    "rollout",
    "rollout_batch",
    "constant_controls",
    "stack_states",
    "SCREEN_MAX_ALTITUDE",
    "MOUNTAIN_LINE_ALTITUDE",
    "MIDDLE_LINE_ALTITUDE",
    "COUNTDOWN_SECONDS",
]
