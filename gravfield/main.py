# gravfield/main.py
import json
import logging
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from gravfield.cli import run_cli
from gravfield.config import settings
from gravfield.config.settings import DELTA, GRAVITATIONAL_CONSTANT, LOG_EVERY_FRAMES, substep_dt
from gravfield.physics import diagnostics
from gravfield.physics.field import Field
from gravfield.physics.point import is_finite_state
from gravfield.simulation.driver import FrameDriver

# --- Setup logger ------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-7s  %(message)s",
    datefmt="%H:%M:%S"
)
log = logging.getLogger("main")


def save_json(obj: Any, name_prefix: str) -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    out_dir = Path(getattr(settings, "OUTPUT_DIR", "outputs"))
    out_dir.mkdir(parents=True, exist_ok=True)
    filename = out_dir / f"{name_prefix}_{ts}.json"
    with open(filename, "w") as f:
        json.dump(obj, f, indent=2, default=lambda o: repr(o))
    return str(filename)


def build_field(bodies, solver, speed: float, buffer_length: int) -> Field:
    """
    One Field step = DELTA / SAMPLES_PER_FRAME real seconds, scaled by `speed`.
    Trails are sampled once per rendered frame.
    """
    return Field.gravitational(
        bodies,
        G=GRAVITATIONAL_CONSTANT,
        dt=substep_dt(speed),
        trajectory_capacity=buffer_length,
        solver=solver,
        record_trajectories=False,
    )


def main():
    try:
        bodies, solver, speed, frames, buffer_length = run_cli()

        field = build_field(bodies, solver, speed, buffer_length)
        driver = FrameDriver(field, frame_duration=DELTA * speed)
        names = [b.name for b in bodies]

        p0 = diagnostics.total_momentum(field.points)
        e0 = diagnostics.total_energy(field.points, GRAVITATIONAL_CONSTANT)
        log.info("Starting simulation: %d bodies, %d frames, solver=%s", len(field), frames, field.solver.name)

        snap = driver.snapshot()
        for snap in driver.run(frames):
            if snap.frame % LOG_EVERY_FRAMES == 0:
                log.info("Frame %d: t=%.2f days", snap.frame, snap.days)
            if not all(is_finite_state(p) for p in field.points):
                log.warning("Non-finite state at frame %d; dt=%.4g s is too large for these bodies", snap.frame, field.dt)
                driver.stop()

        p1 = diagnostics.total_momentum(field.points)
        e1 = diagnostics.total_energy(field.points, GRAVITATIONAL_CONSTANT)
        log.info(
            "Done: t=%.2f days, |dp|=%.3e kg m/s, energy drift=%.3e",
            driver.elapsed_days, float(((p1 - p0) ** 2).sum() ** 0.5), diagnostics.relative_drift(e0, e1),
        )

        out = {
            "meta": {
                "bodies": names,
                "solver": field.solver.name,
                "dt": field.dt,
                "substeps_per_frame": driver.substeps,
                "speed": speed,
                "timestamp_utc": datetime.now(timezone.utc).isoformat()
            },
            "frame": snap.to_dict(),
        }
        out_file = save_json(out, "trajectories")
        log.info("Saved final frame: %s", out_file)

    except Exception:
        log.error("Fatal exception during run:")
        traceback.print_exc()


if __name__ == "__main__":
    main()
