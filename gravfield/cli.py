# gravfield/cli.py
import math

from gravfield.config import settings
from gravfield.config.settings import (
    BUFFER_LENGTH,
    BUFFER_LENGTH_MAX,
    BUFFER_LENGTH_MIN,
    DEFAULT_FRAMES,
    SECS_PER_DAY,
    SPEED,
    clamp_buffer_length,
)
from gravfield.models.bodies import sun_earth, to_center_of_mass_frame
from gravfield.physics.solver import SOLVERS


def ask(prompt, default, parse, accept, complaint):
    """
    Prompt until parse(answer) gives a value accept() takes.
    Blank input or EOF (non-interactive run) returns `default`.
    """
    while True:
        try:
            answer = input(prompt).strip()
        except EOFError:
            return default
        if not answer:
            return default
        try:
            value = parse(answer)
        except ValueError:
            value = None
        if value is not None and accept(value):
            return value
        print(f"❌ {complaint}")


def ask_speed():
    """Simulated seconds per real second; finite and > 0."""
    return ask(
        f"\nSimulated seconds per real second [default {SPEED:.4g} ≈ {SPEED / SECS_PER_DAY:.1f} days]: ",
        float(SPEED),
        float,
        lambda v: math.isfinite(v) and v > 0.0,
        "Speed must be a positive number of seconds.",
    )


def ask_frames():
    return ask(
        f"Frames to run [default {DEFAULT_FRAMES}]: ",
        int(DEFAULT_FRAMES),
        int,
        lambda v: v >= 1,
        "Frames must be a whole number of at least 1.",
    )


def ask_trail_length():
    """Trail length in samples, clamped into the buffer limits."""
    length = ask(
        f"Trail length ({BUFFER_LENGTH_MIN}–{BUFFER_LENGTH_MAX}) [default {BUFFER_LENGTH}]: ",
        int(BUFFER_LENGTH),
        int,
        lambda v: True,
        "Trail length must be a whole number.",
    )
    return clamp_buffer_length(length)


def choose_solver():
    """
    Choose the fixed-step integration scheme.
      1 -> symplectic Euler [recommended]
      2 -> explicit Euler
      3 -> RK4
    """
    print("\n⚙️  Integrator")
    print("  1) Symplectic Euler (Recommended)")
    print("  2) Explicit Euler")
    print("  3) Runge-Kutta 4")

    try:
        choice = input("Select integrator [1]: ").strip()
    except EOFError:
        choice = ""

    if choice == "2":
        return "euler"
    if choice == "3":
        return "rk4"
    return settings.DEFAULT_SOLVER


def choose_bodies():
    """Sun/Earth preset, optionally moved to the centre-of-mass frame."""
    print("\n☀️ Bodies: Sun + Earth (Earth at perihelion)")
    try:
        com_choice = input("Move to centre-of-mass frame? (y/N): ").strip().lower()
    except EOFError:
        com_choice = "n"

    bodies = sun_earth()
    if com_choice == "y":
        bodies = to_center_of_mass_frame(bodies)

    for b in bodies:
        print(f"✔ {b.name}: m={b.mass:.4e} kg at [{b.position.x:.3e}, {b.position.y:.3e}, {b.position.z:.3e}] m")
    return bodies


def run_cli():
    print("======================================")
    print("    GRAVITY FIELD SIMULATOR (CLI)     ")
    print("======================================")

    bodies = choose_bodies()
    solver = choose_solver()

    speed = ask_speed()
    frames = ask_frames()
    buffer_length = ask_trail_length()

    print("\n✅ CLI input complete.")
    print(f"→ Integrator: {solver} (available: {', '.join(sorted(SOLVERS))})")
    print(f"→ Speed: {speed:.4g} s/s, frames: {frames}, trail length: {buffer_length}")

    return bodies, solver, float(speed), int(frames), int(buffer_length)
