# Copyright (C) 2025 Gil Benezer
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Fixed-Step Integrators

Implements the classic fixed time-step Runge-Kutta method (RK4) on top
of the package's vector-field interface. Useful as a reproducible
baseline against the adaptive scipy solvers: the sample times are known
in advance and the work is exactly 4 evaluations per step.
"""

from typing import Optional

import numpy as np

from hhsym.systems.base.numerical_integration.integrator_base import (
    IntegratorBase,
    StepMode,
)
from hhsym.types.core import ScalarLike, StateVector, VectorFieldFunction
from hhsym.types.trajectories import IntegrationResult, TimePoints, TimeSpan


class RK4Integrator(IntegratorBase):
    """
    Classic 4th-order Runge-Kutta integrator.

    Algorithm:
        k1 = f(x_k, t_k)
        k2 = f(x_k + 0.5*dt*k1, t_k + 0.5*dt)
        k3 = f(x_k + 0.5*dt*k2, t_k + 0.5*dt)
        k4 = f(x_k + dt*k3, t_k + dt)
        x_{k+1} = x_k + (dt/6) * (k1 + 2*k2 + 2*k3 + k4)

    Characteristics:
    - Order: 4 (error ∝ dt⁴)
    - Function evaluations: 4 per step
    - Not symplectic: energy drifts slowly, at a rate set by dt

    Best for:
    - Smooth, non-stiff systems
    - Reproducible, evenly sampled trajectories

    Not recommended for:
    - Stiff systems (use Radau/BDF instead)

    Examples
    --------
    >>> integrator = RK4Integrator(system, dt=0.01)
    >>> result = integrator.integrate(
    ...     x0=np.array([0.2, 0.0, 0.4, 0.0]),
    ...     t_span=(0.0, 100.0)
    ... )
    >>> print(f"RK4: {result['nfev']} evaluations for {result['nsteps']} steps")
    """

    def __init__(self, system: VectorFieldFunction, dt: ScalarLike, **options):
        """
        Initialize RK4 integrator.

        Parameters
        ----------
        system : VectorFieldFunction
            Vector field ``system(x, p, t)``
        dt : float
            Fixed time step
        """
        super().__init__(system, dt, StepMode.FIXED, **options)

    def step(
        self, x: StateVector, dt: Optional[ScalarLike] = None, t: ScalarLike = 0.0
    ) -> StateVector:
        """
        Take one RK4 step using four function evaluations.

        Parameters
        ----------
        x : np.ndarray
            Current state
        dt : Optional[float]
            Time step (uses self.dt if None)
        t : float
            Current time (forwarded to the vector field)

        Returns
        -------
        np.ndarray
            Next state after RK4 step
        """
        dt = dt if dt is not None else self.dt

        k1 = self._evaluate_dynamics(x, t)
        k2 = self._evaluate_dynamics(x + 0.5 * dt * k1, t + 0.5 * dt)
        k3 = self._evaluate_dynamics(x + 0.5 * dt * k2, t + 0.5 * dt)
        k4 = self._evaluate_dynamics(x + dt * k3, t + dt)

        x_next = x + (dt / 6.0) * (k1 + 2 * k2 + 2 * k3 + k4)

        self._stats["total_steps"] += 1

        return x_next

    def integrate(
        self,
        x0: StateVector,
        t_span: TimeSpan,
        t_eval: Optional[TimePoints] = None,
        dense_output: bool = False,
    ) -> IntegrationResult:
        """
        Integrate using fixed RK4 steps.

        Parameters
        ----------
        x0 : np.ndarray
            Initial state (nx,)
        t_span : Tuple[float, float]
            Integration interval (t_start, t_end)
        t_eval : Optional[np.ndarray]
            Output times. Steps of at most dt are taken between consecutive
            output times. If None, uses a uniform grid with spacing close
            to dt ending exactly at t_end.
        dense_output : bool
            Ignored (fixed-step methods don't support dense output)

        Returns
        -------
        IntegrationResult
            TypedDict containing trajectory and diagnostics. If the state
            becomes non-finite the trajectory is cut at the last finite
            sample and ``success`` is False.
        """
        t0, tf = self._validate_time_span(t_span)
        x = np.asarray(x0, dtype=float)

        if t_eval is None:
            # Tolerance keeps (tf - t0) / dt = 1000.0000000001 at 1000 steps
            num_steps = max(1, int(np.ceil((tf - t0) / self.dt - 1e-9)))
            t_points = np.linspace(t0, tf, num_steps + 1)
        else:
            t_points = np.asarray(t_eval, dtype=float)
            if t_points[0] != t0 or t_points[-1] > tf or np.any(np.diff(t_points) <= 0):
                raise ValueError(
                    "t_eval must start at t_start, stay within t_span and be strictly increasing"
                )

        fev_before = self._stats["total_fev"]
        steps_taken = 0
        success = True
        message = "RK4 integration completed"

        times = [float(t_points[0])]
        trajectory = [x]

        record = {}
        with self._profiled(record):
            for i in range(len(t_points) - 1):
                t = float(t_points[i])
                interval = float(t_points[i + 1]) - t

                # Sub-step so no step exceeds dt
                n_sub = max(1, int(np.ceil(interval / self.dt - 1e-12)))
                h = interval / n_sub
                for k in range(n_sub):
                    x = self.step(x, dt=h, t=t + k * h)
                    steps_taken += 1

                if not np.all(np.isfinite(x)):
                    success = False
                    message = f"Non-finite state encountered at t={t_points[i + 1]:.6g}"
                    break

                times.append(float(t_points[i + 1]))
                trajectory.append(x)

        result: IntegrationResult = {
            "t": np.asarray(times),
            "x": np.stack(trajectory),
            "success": success,
            "message": message,
            "nfev": self._stats["total_fev"] - fev_before,
            "nsteps": steps_taken,
            "integration_time": record["integration_time"],
            "solver": self.name,
        }

        if "peak_memory" in record:
            result["peak_memory"] = record["peak_memory"]

        return result

    @property
    def name(self) -> str:
        return "RK4 (Classic)"


__all__ = [
    "RK4Integrator",
]
