import numpy as np

from gravfield.config.settings import ConfigurationError, DEFAULT_SOLVER, require_positive
from gravfield.physics.vector import Vector3, Vector6


class Solver:
    """
    Fixed-step integrator for a single 6D state.

    step(state, acceleration, dt) returns the state dt later, where
    d(upper)/dt = lower and d(lower)/dt = acceleration(upper).
    The input state is never modified.
    """
    name = "base"

    def step(self, state: Vector6, acceleration, dt: float) -> Vector6:
        raise NotImplementedError

    @staticmethod
    def _check_dt(dt) -> float:
        return require_positive("dt", dt)


class EulerSolver(Solver):
    """
    Explicit (forward) Euler. First order; drifts outward on closed orbits.
    """
    name = "euler"

    def step(self, state, acceleration, dt):
        dt = self._check_dt(dt)
        r = state.upper
        v = state.lower
        a = acceleration(r)
        return Vector6.from_vectors(r + v * dt, v + a * dt)


class SymplecticEulerSolver(Solver):
    """
    Semi-implicit Euler (kick, then drift with the new velocity).
    First order but symplectic, so orbital energy oscillates instead of drifting.
    """
    name = "symplectic_euler"

    def step(self, state, acceleration, dt):
        dt = self._check_dt(dt)
        r = state.upper
        v_next = state.lower + acceleration(r) * dt
        return Vector6.from_vectors(r + v_next * dt, v_next)


class RK4Solver(Solver):
    """
    Runge-Kutta 4th order solver for state integration.
    """
    name = "rk4"

    def step(self, state, acceleration, dt):
        """
        Perform a single RK4 step.
        """
        dt = self._check_dt(dt)

        def deriv(y):
            a = acceleration(Vector3.from_array(y[:3]))
            return np.hstack((y[3:], a.to_array()))

        y0 = state.to_array()

        k1 = deriv(y0)
        k2 = deriv(y0 + 0.5 * dt * k1)
        k3 = deriv(y0 + 0.5 * dt * k2)
        k4 = deriv(y0 + dt * k3)

        y_next = y0 + (dt / 6.0) * (k1 + 2 * k2 + 2 * k3 + k4)

        return Vector6.from_array(y_next)


SOLVERS = {
    EulerSolver.name: EulerSolver,
    SymplecticEulerSolver.name: SymplecticEulerSolver,
    RK4Solver.name: RK4Solver,
}


def get_solver(name=None) -> Solver:
    key = (DEFAULT_SOLVER if name is None else str(name)).lower()
    try:
        return SOLVERS[key]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown solver: {name!r} (expected one of {', '.join(sorted(SOLVERS))})"
        ) from None
