"""Stateful host wrapper around the pure simulation core.

A front end owns one ``FlightSession``: it forwards key events and the
elapsed milliseconds of each animation frame, and reads ``state`` or
``readout()`` to draw.

Example:
    ```python
    session = FlightSession()
    session.key_down("w")
    for _ in range(120):
        session.advance(16.67)
    print(session.readout().altitude)
    ```
"""

from typing import Optional

from hotair import constants as C
from hotair.logging import ConsoleLogger
from hotair.readout import FlightReadout, read_state
from hotair.simulation import add_sandbag, drop_sandbag, frame_dt, set_burner, step
from hotair.state import DEFAULT_PARAMS, FlightControls, FlightParams, FlightState, create_state


class HighScoreTracker:
    """Best score across the episodes of one run; nothing is persisted."""

    def __init__(self):
        self.best = 0
        self.history = []

    def record(self, score: int) -> bool:
        """Record a finished episode's score; returns True on a new best."""
        self.history.append(score)
        if score > self.best:
            self.best = score
            return True
        return False


class FlightSession:
    """Keyboard-driven balloon session with best-score tracking."""

    BURN_KEYS = frozenset({"w", " ", "arrowup"})
    DROP_KEY = "d"
    RESET_KEY = "r"

    def __init__(
        self,
        sandbags: int = C.DEFAULT_SANDBAGS,
        max_sandbags: int = C.DEFAULT_MAX_SANDBAGS,
        params: FlightParams = DEFAULT_PARAMS,
        frame_duration_ms: float = C.FRAME_DURATION_MS,
        max_dt: float = C.MAX_FRAME_DT,
        logger: Optional[ConsoleLogger] = None,
    ):
        """
        Args:
            sandbags: Sandbags loaded at the start of each episode
            max_sandbags: Ballast capacity
            params: Tuning constants
            frame_duration_ms: Nominal frame duration used to compute ``dt``
            max_dt: Upper bound on ``dt`` after a stalled frame
            logger: Logger for episode outcomes; a quiet-by-default one is created if omitted
        """
        self.sandbags = sandbags
        self.max_sandbags = max_sandbags
        self.params = params
        self.frame_duration_ms = frame_duration_ms
        self.max_dt = max_dt
        self.logger = logger or ConsoleLogger(name="Session", log_level="WARNING")
        self.high_scores = HighScoreTracker()
        self.held_keys = set()
        self.episode = 0

        if frame_duration_ms <= 0:
            raise ValueError(f"frame_duration_ms must be positive, got {frame_duration_ms}")
        self._state = create_state(sandbags, max_sandbags, params)

    @property
    def state(self) -> FlightState:
        return self._state

    @property
    def best_score(self) -> int:
        return self.high_scores.best

    def reset(self) -> FlightState:
        """Start a fresh episode; held keys stay held.

        An episode abandoned after liftoff still counts towards the best score.
        """
        if bool(self._state.has_lifted_off) and not bool(self._state.game_over):
            self.high_scores.record(int(self._state.score))
        self._state = create_state(self.sandbags, self.max_sandbags, self.params)
        self.episode += 1
        self.logger.info(f"Episode {self.episode} started")
        return self._state

    def key_down(self, key: str):
        key = key.lower()
        self.held_keys.add(key)
        if key == self.DROP_KEY:
            self.drop_sandbag()
        elif key == self.RESET_KEY and bool(self._state.game_over):
            self.reset()

    def key_up(self, key: str):
        self.held_keys.discard(key.lower())

    @property
    def burning(self) -> bool:
        return bool(self.held_keys & self.BURN_KEYS)

    def set_burner(self, value: float):
        self._state = set_burner(self._state, value)

    def add_sandbag(self):
        self._state = add_sandbag(self._state)

    def drop_sandbag(self):
        self._state = drop_sandbag(self._state)

    def advance(self, elapsed_ms: float) -> FlightState:
        """Run one animation frame that took ``elapsed_ms`` of wall-clock time."""
        dt = frame_dt(elapsed_ms, self.frame_duration_ms, self.max_dt)
        controls = FlightControls(
            burner_delta=C.BURNER_RAMP_RATE * dt if self.burning else 0.0,
            sandbag_delta=0,
        )
        prev = self._state
        self._state = step(prev, dt, controls, self.params)

        if bool(self._state.game_over) and not bool(prev.game_over):
            self._finish()
        elif bool(self._state.is_landed) and not bool(prev.is_landed):
            self.logger.debug(
                f"Landed safely after {float(self._state.flight_time):.1f}s, "
                f"max altitude {float(self._state.max_altitude):.0f}m"
            )
        return self._state

    def _finish(self):
        score = int(self._state.score)
        self.logger.info(
            f"Episode {self.episode} over: {self._state.reason.label} "
            f"(score {score}, max altitude {float(self._state.max_altitude):.0f}m)"
        )
        if self.high_scores.record(score):
            self.logger.info(f"New best score: {score}")

    def readout(self) -> FlightReadout:
        return read_state(self._state, self.best_score, self.params)
