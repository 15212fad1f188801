import json
import os
import time

import hydra
import numpy as np
from omegaconf import DictConfig, OmegaConf

from hotair.autopilot import Autopilot
from hotair.logging import FlightLogger
from hotair.session import FlightSession
from hotair.state import FlightParams


def fly_episode(session: FlightSession, autopilot: Autopilot, max_ticks: int, frame_ms: float) -> dict:
    """Fly one autopilot episode until a terminal outcome, a safe landing or ``max_ticks``."""
    for _ in range(max_ticks):
        session.set_burner(autopilot.burner_setting(session.state))
        state = session.advance(frame_ms)
        if bool(state.game_over):
            outcome = state.reason.label
            break
        if bool(state.is_landed) and bool(state.has_lifted_off):
            outcome = "landed"
            break
    else:
        outcome = "airborne" if bool(session.state.has_lifted_off) else "grounded"

    state = session.state
    return {
        "outcome": outcome,
        "score": int(state.score),
        "max_altitude": float(state.max_altitude),
        "flight_time": float(state.flight_time),
        "fuel": float(state.fuel),
        "target": autopilot.target_altitude,
    }


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    cfg = OmegaConf.to_container(cfg)

    params = FlightParams(**cfg.pop("params", {}) or {})
    pilot_cfg = cfg.pop("autopilot")
    spread = pilot_cfg.pop("target_spread", 0.0)

    logger = FlightLogger(log_level=cfg.get("log_level", "INFO"))
    logger.log_session_start(cfg)

    session = FlightSession(
        sandbags=cfg["sandbags"],
        max_sandbags=cfg["max_sandbags"],
        params=params,
        frame_duration_ms=cfg["frame_ms"],
        logger=logger,
    )
    rng = np.random.default_rng(cfg.get("seed", 0))

    summaries = []
    for episode in range(cfg["episodes"]):
        target = pilot_cfg["target_altitude"] * (1.0 + spread * rng.uniform(-1.0, 1.0))
        autopilot = Autopilot(**dict(pilot_cfg, target_altitude=target), params=params)

        summary = fly_episode(session, autopilot, cfg["max_ticks"], cfg["frame_ms"])
        logger.log_episode_end(episode, summary)
        summaries.append(summary)
        session.reset()

    logger.log_session_end(session.best_score)

    if cfg.get("save_results", False):
        job_id = time.strftime("%Y%m%d_%H%M%S")
        os.makedirs("results", exist_ok=True)
        with open(f"results/{job_id}.json", "w") as f:
            json.dump({"config": cfg, "episodes": summaries, "best_score": session.best_score}, f, indent=2)
        print(f"Results saved in results/{job_id}.json")


if __name__ == "__main__":
    main()
