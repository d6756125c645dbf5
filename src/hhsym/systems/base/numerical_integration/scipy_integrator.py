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
Scipy Integrator

Adaptive Integration using scipy.integrate.solve_ivp

Wraps scipy's ODE solvers with adaptive time stepping, error control,
and stiffness handling. The solver is the external collaborator: this
module only adapts the vector field to scipy's ``f(t, x)`` signature and
packs the solver's statistics into an IntegrationResult.

Supported Methods:
- RK45: Explicit Runge-Kutta 5(4) - general purpose
- RK23: Explicit Runge-Kutta 3(2) - low accuracy/fast
- DOP853: Explicit Runge-Kutta 8 - high accuracy
- Radau: Implicit Runge-Kutta (Radau IIA) - stiff systems
- BDF: Backward Differentiation Formula - very stiff systems
- LSODA: Automatic stiffness detection and switching
"""

from typing import Callable, Optional

import numpy as np
import scipy.integrate

from hhsym.systems.base.numerical_integration.integrator_base import (
    IntegratorBase,
    StepMode,
)
from hhsym.systems.base.numerical_integration.method_registry import (
    ADAPTIVE_METHODS,
    IMPLICIT_ADAPTIVE_METHODS,
    is_implicit,
)
from hhsym.types.core import ScalarLike, StateVector, VectorFieldFunction
from hhsym.types.trajectories import IntegrationResult, TimePoints, TimeSpan


class ScipyIntegrator(IntegratorBase):
    """
    Adaptive integrator using scipy.integrate.solve_ivp.

    Key Features:
    - Automatic step size adaptation
    - Error control (rtol, atol)
    - Dense output (interpolated solution)
    - Event detection
    - Analytic Jacobians for implicit methods when the system provides one

    Available Methods:
    ------------------
    **Explicit (Non-Stiff):**
    - 'RK45': Dormand-Prince 5(4) [DEFAULT]
    - 'RK23': Bogacki-Shampine 3(2)
    - 'DOP853': Dormand-Prince 8(5,3)

    **Implicit (Stiff):**
    - 'Radau': Implicit Runge-Kutta, 5th order
    - 'BDF': Backward Differentiation Formula, variable order (1-5)

    **Automatic:**
    - 'LSODA': Switches between Adams (non-stiff) and BDF (stiff)

    Examples
    --------
    >>> integrator = ScipyIntegrator(system, method='RK45', rtol=1e-8, atol=1e-10)
    >>> result = integrator.integrate(
    ...     x0=np.array([0.2, 0.0, 0.4, 0.0]),
    ...     t_span=(0.0, 500.0)
    ... )
    >>> print(f"Function evals: {result['nfev']}")
    >>>
    >>> stiff = ScipyIntegrator(system, method='Radau')
    >>> result = stiff.integrate(x0, (0.0, 50.0))
    >>> print(f"Jacobians: {result['njev']}, LU decompositions: {result['nlu']}")
    """

    def __init__(
        self,
        system: VectorFieldFunction,
        dt: Optional[ScalarLike] = 0.01,
        method: str = "RK45",
        **options,
    ):
        """
        Initialize scipy adaptive integrator.

        Parameters
        ----------
        system : VectorFieldFunction
            Vector field ``system(x, p, t)``
        dt : Optional[float]
            Initial time step guess (kept for API consistency)
        method : str
            Solver method: 'RK45', 'RK23', 'DOP853', 'Radau', 'BDF', 'LSODA'
        **options : dict
            Solver options:
            - rtol: Relative tolerance (default: 1e-6)
            - atol: Absolute tolerance (default: 1e-8)
            - max_step: Maximum step size (default: inf)
            - first_step: Initial step size (default: auto)
            - use_jacobian: Pass ``system.jacobian`` to implicit methods
              (default: True)

        Raises
        ------
        ValueError
            If the method is not a scipy method
        """
        super().__init__(system, dt, StepMode.ADAPTIVE, **options)

        if method not in ADAPTIVE_METHODS:
            raise ValueError(f"Invalid method '{method}'. Choose from: {sorted(ADAPTIVE_METHODS)}")

        self.method = method
        self.use_jacobian = options.get("use_jacobian", True)

    def step(self, x: StateVector, dt: Optional[ScalarLike] = None) -> StateVector:
        """
        Take one integration step (uses integrate() internally).

        Integrates from t=0 to t=dt with adaptive stepping internally,
        then returns the final state.

        Notes
        -----
        This is less efficient than integrate() for multiple steps
        because it reinitializes the solver each time.
        """
        dt = dt if dt is not None else self.dt

        result = self.integrate(x0=x, t_span=(0.0, dt), t_eval=np.array([0.0, dt]))

        return result["x"][-1]

    def _jacobian_callback(self):
        jacobian = getattr(self.system, "jacobian", None)
        if not (self.use_jacobian and callable(jacobian) and is_implicit(self.method)):
            return None

        def jac(t: float, x: np.ndarray) -> np.ndarray:
            return np.asarray(jacobian(x), dtype=float)

        return jac

    def integrate(
        self,
        x0: StateVector,
        t_span: TimeSpan,
        t_eval: Optional[TimePoints] = None,
        dense_output: bool = False,
        events: Optional[Callable] = None,
    ) -> IntegrationResult:
        """
        Integrate using scipy.solve_ivp with adaptive stepping.

        Parameters
        ----------
        x0 : np.ndarray
            Initial state (nx,)
        t_span : Tuple[float, float]
            Integration interval (t_start, t_end)
        t_eval : Optional[np.ndarray]
            Specific times at which to store solution
            If None, returns the accepted steps. Otherwise the dense
            solution is sampled there; stepping is unaffected
        dense_output : bool
            If True, compute continuous solution (allows interpolation)
        events : Optional[Callable]
            Event function for detection (e.g., crossing a section)

        Returns
        -------
        IntegrationResult
            TypedDict containing:
            - t, x (time-major), success, message, nfev, nsteps,
              integration_time, solver
            - njev, nlu, status (when scipy reports them)
            - sol, dense_output (if dense_output=True)
            - peak_memory (if track_memory=True)

        Examples
        --------
        >>> t_eval = np.linspace(0, 500, 5001)
        >>> result = integrator.integrate(x0, (0, 500), t_eval=t_eval)
        >>>
        >>> # Poincaré section: y = 0 crossings with p_y > 0
        >>> def section(t, x):
        ...     return x[1]
        >>> section.direction = 1
        >>> result = integrator.integrate(x0, (0, 500), events=section)
        """
        t0, tf = self._validate_time_span(t_span)
        x0 = np.asarray(x0, dtype=float)

        if t_eval is not None:
            t_eval = np.asarray(t_eval, dtype=float)
            if t_eval.ndim != 1 or np.any(t_eval < t0) or np.any(t_eval > tf):
                raise ValueError("t_eval must be 1-dimensional and lie within t_span")
            if np.any(np.diff(t_eval) <= 0):
                raise ValueError("t_eval must be strictly increasing")

        def ode_func(t: float, x: np.ndarray) -> np.ndarray:
            """Dynamics function in scipy's signature: f(t, x) → dx/dt"""
            return self._evaluate_dynamics(x, t)

        record = {}
        with self._profiled(record):
            # Step on the solver's own grid and sample t_eval from the dense
            # solution, so sol.t always holds exactly the accepted steps
            sol = scipy.integrate.solve_ivp(
                fun=ode_func,
                t_span=t_span,
                y0=x0,
                method=self.method,
                dense_output=dense_output or t_eval is not None,
                events=events,
                rtol=self.rtol,
                atol=self.atol,
                max_step=self.options.get("max_step", np.inf),
                first_step=self.options.get("first_step", None),
                **self._solver_kwargs(),
            )

        nsteps = max(0, len(sol.t) - 1)
        self._stats["total_steps"] += nsteps

        if t_eval is None:
            t_out, x_out = sol.t, sol.y.T  # scipy returns (nx, T), we want (T, nx)
        else:
            t_out, x_out = self._sample(sol, t_eval)

        result: IntegrationResult = {
            "t": t_out,
            "x": x_out,
            "success": bool(sol.success),
            "message": sol.message,
            "nfev": sol.nfev,
            "nsteps": nsteps,
            "integration_time": record["integration_time"],
            "solver": self.name,
        }

        if hasattr(sol, "njev"):
            result["njev"] = sol.njev

        if hasattr(sol, "nlu"):
            result["nlu"] = sol.nlu

        if hasattr(sol, "status"):
            result["status"] = sol.status

        if "peak_memory" in record:
            result["peak_memory"] = record["peak_memory"]

        if dense_output and getattr(sol, "sol", None) is not None:
            result["sol"] = sol.sol
            result["dense_output"] = True

        if events is not None:
            result["t_events"] = sol.t_events
            result["x_events"] = sol.y_events

        return result

    @staticmethod
    def _sample(sol, t_eval: np.ndarray):
        """
        Evaluate the dense solution at the requested times.

        Only times up to the last accepted step are kept, so a failed or
        terminated run returns the sampled prefix.
        """
        t_reached = sol.t[-1]
        t_out = t_eval[t_eval <= t_reached]
        if len(sol.t) < 2 or sol.sol is None:
            t_out = t_out[t_out == sol.t[0]]
            return t_out, np.tile(sol.y[:, 0], (len(t_out), 1))
        return t_out, np.asarray(sol.sol(t_out)).T

    def _solver_kwargs(self):
        jac = self._jacobian_callback()
        return {} if jac is None else {"jac": jac}

    @property
    def name(self) -> str:
        stiff_indicator = " (Stiff)" if self.method in IMPLICIT_ADAPTIVE_METHODS else ""
        auto_indicator = " (Auto-Stiffness)" if self.method == "LSODA" else ""
        return f"scipy.{self.method}{stiff_indicator}{auto_indicator}"

    def __repr__(self) -> str:
        return (
            f"ScipyIntegrator(method='{self.method}', "
            f"rtol={self.rtol:.1e}, atol={self.atol:.1e})"
        )
