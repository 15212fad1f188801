"""Altitude-holding autopilot for demos and scripted flights."""

import numpy as np

from hotair.state import DEFAULT_PARAMS, FlightParams, FlightState


class Autopilot:
    """Climb to a target altitude, hold it for a while, then land gently.

    The burner is switched on whenever the envelope is cooler than the
    temperature needed for the wanted climb rate. That temperature comes
    from the force balance (buoyancy against gravity, ballast and drag), so
    the controller never stores more heat than it needs; cooling is slow
    and excess heat turns straight into overshoot.
    """

    DRAG_RATE = 0.005  # 1 - DRAG, per tick

    def __init__(
        self,
        target_altitude: float = 300.0,
        cruise_seconds: float = 30.0,
        gain: float = 0.01,
        velocity_gain: float = 0.001,
        max_climb: float = 1.0,
        max_descent: float = 0.5,
        min_descent: float = 0.3,
        params: FlightParams = DEFAULT_PARAMS,
    ):
        if max_descent < min_descent:
            raise ValueError(f"max_descent ({max_descent}) must be >= min_descent ({min_descent})")
        if max_descent >= params.safe_landing_speed:
            raise ValueError(
                f"max_descent ({max_descent}) must stay below the safe landing speed "
                f"({params.safe_landing_speed})"
            )
        self.target_altitude = target_altitude
        self.cruise_seconds = cruise_seconds
        self.gain = gain
        self.velocity_gain = velocity_gain
        self.max_climb = max_climb
        self.max_descent = max_descent
        self.min_descent = min_descent
        self.params = params

    def landing(self, state: FlightState) -> bool:
        return float(state.flight_time) >= self.cruise_seconds

    def desired_velocity(self, state: FlightState) -> float:
        altitude = float(state.altitude)
        if self.landing(state):
            wanted = min(-self.gain * altitude, -self.min_descent)
        else:
            wanted = self.gain * (self.target_altitude - altitude)
        return float(np.clip(wanted, -self.max_descent, self.max_climb))

    def target_temperature(self, state: FlightState) -> float:
        p = self.params
        desired = self.desired_velocity(state)
        error = desired - float(state.velocity)
        weight = p.gravity + int(state.sandbags) * p.sandbag_weight
        acceleration = weight + self.DRAG_RATE * desired + self.velocity_gain * error
        return p.ambient_temp + acceleration / p.buoyancy_factor

    def burner_setting(self, state: FlightState) -> float:
        """Burner power to command for the next tick."""
        if float(state.fuel) <= 0:
            return 0.0
        return 100.0 if float(state.air_temperature) < self.target_temperature(state) else 0.0
