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
Integrator Base - Abstract Interface for Numerical Integration

Provides a unified interface for integrating autonomous vector fields
with both fixed and adaptive time stepping.

This module defines the abstract base class that all integrators must implement,
the StepMode enum for specifying integration behavior, and IntegrationError,
the distinguishable "integration failed" outcome.

Design Note
-----------
Integrators call the system through the generic vector-field signature
``system(x, p, t)``. The parameter slot ``p`` is forwarded from the
``params`` option (default None) and ``t`` is the solver time, so any
callable following that signature can be integrated, not just the
symbolic systems in this package.
"""

import time
import tracemalloc
from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np

from hhsym.types.core import (
    DerivativeVector,
    ParameterVector,
    ScalarLike,
    StateVector,
    VectorFieldFunction,
)
from hhsym.types.trajectories import IntegrationResult, TimePoints, TimeSpan


class StepMode(Enum):
    """
    Integration step mode.

    Attributes
    ----------
    FIXED : str
        Fixed time step - integrator uses constant dt
        Best for: Simple smooth ODEs, reproducible sampling

    ADAPTIVE : str
        Adaptive time step - integrator adjusts dt based on error estimates
        Best for: Stiff systems, high accuracy requirements, variable dynamics
    """

    FIXED = "fixed"
    ADAPTIVE = "adaptive"


class IntegrationError(RuntimeError):
    """
    Raised when numerical integration fails.

    The partial result (whatever the solver produced before failing) is
    kept on the exception so callers can inspect it.

    Attributes
    ----------
    result : Optional[IntegrationResult]
        Partial trajectory and diagnostics
    """

    def __init__(self, message: str, result: Optional[IntegrationResult] = None):
        super().__init__(message)
        self.result = result


class IntegratorBase(ABC):
    """
    Abstract base class for numerical integrators.

    All integrators must implement:
    - step(): Single integration step
    - integrate(): Multi-step integration over interval
    - name: Integrator name for display

    Result Types
    ------------
    All integrators return IntegrationResult TypedDict with:
    - t: Time points (T,)
    - x: State trajectory (T, nx)
    - success: Integration succeeded
    - message: Status message
    - nfev: Number of function evaluations
    - nsteps: Number of steps taken
    - integration_time: Computation time
    - solver: Integrator name

    Examples
    --------
    >>> integrator = RK4Integrator(system, dt=0.01)
    >>> x_next = integrator.step(x)
    >>>
    >>> result = integrator.integrate(
    ...     x0=np.array([0.2, 0.0, 0.4, 0.0]),
    ...     t_span=(0.0, 10.0)
    ... )
    >>> print(f"Steps: {result['nsteps']}, Function evals: {result['nfev']}")
    """

    def __init__(
        self,
        system: VectorFieldFunction,
        dt: Optional[ScalarLike] = None,
        step_mode: StepMode = StepMode.FIXED,
        **options,
    ):
        """
        Initialize integrator.

        Parameters
        ----------
        system : VectorFieldFunction
            Vector field ``system(x, p, t) -> dx/dt``
        dt : Optional[float]
            Time step:
            - FIXED mode: Required, constant step size
            - ADAPTIVE mode: Initial guess, will be adjusted
        step_mode : StepMode
            FIXED or ADAPTIVE stepping
        **options : dict
            Integrator-specific options:
            - rtol : float
                Relative tolerance (adaptive only, default: 1e-6)
            - atol : float
                Absolute tolerance (adaptive only, default: 1e-8)
            - max_step : float
                Maximum step size (adaptive only)
            - first_step : float
                Initial step size (adaptive only)
            - params : sequence
                Value passed in the parameter slot of the vector field
            - track_memory : bool
                Record peak traced memory of each integrate() call
            - backend : str
                Array backend; only 'numpy' is supported

        Raises
        ------
        ValueError
            If FIXED mode specified without dt, dt is not positive, or the
            backend is not numpy
        """
        self.system = system
        self.dt = dt
        self.step_mode = step_mode
        self.options = options

        if step_mode == StepMode.FIXED and dt is None:
            raise ValueError(
                "Time step dt is required for FIXED step mode. " "Specify dt in constructor."
            )

        if step_mode == StepMode.ADAPTIVE and dt is None:
            # Reasonable default initial guess
            self.dt = 0.01

        if self.dt is not None and self.dt <= 0:
            raise ValueError(f"Time step dt must be positive, got {self.dt}")

        backend = options.get("backend", "numpy")
        if backend != "numpy":
            raise ValueError(
                f"Only the 'numpy' backend is supported, got '{backend}'"
            )

        self.rtol = options.get("rtol", 1e-6)
        self.atol = options.get("atol", 1e-8)
        self.params: ParameterVector = options.get("params", None)
        self.track_memory = bool(options.get("track_memory", False))

        self._stats = {
            "total_steps": 0,
            "total_fev": 0,  # Function evaluations
            "total_time": 0.0,
        }

    @abstractmethod
    def step(self, x: StateVector, dt: Optional[ScalarLike] = None) -> StateVector:
        """
        Take one integration step: x(t) → x(t + dt).

        Parameters
        ----------
        x : np.ndarray
            Current state (nx,)
        dt : Optional[float]
            Step size (uses self.dt if None)

        Returns
        -------
        np.ndarray
            Next state x(t + dt)
        """
        pass

    @abstractmethod
    def integrate(
        self,
        x0: StateVector,
        t_span: TimeSpan,
        t_eval: Optional[TimePoints] = None,
        dense_output: bool = False,
    ) -> IntegrationResult:
        """
        Integrate over a time interval.

        Parameters
        ----------
        x0 : np.ndarray
            Initial state (nx,)
        t_span : Tuple[float, float]
            Integration interval (t_start, t_end)
        t_eval : Optional[np.ndarray]
            Specific times at which to store solution
            If None:
            - FIXED mode: Uses t = t_start + k*dt for k=0,1,2,...
            - ADAPTIVE mode: Uses solver's internal time points
        dense_output : bool
            If True, return dense interpolated solution (adaptive only)

        Returns
        -------
        IntegrationResult
            TypedDict with the trajectory and solver diagnostics.
            Failure is reported through ``success=False``; it is up to the
            caller to turn that into an IntegrationError.
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Get integrator name for display and logging.

        Examples
        --------
        >>> integrator.name
        'RK4 (Classic)'
        >>> adaptive_integrator.name
        'scipy.RK45'
        """
        pass

    # ========================================================================
    # Common Utilities (Shared by All Integrators)
    # ========================================================================

    def _evaluate_dynamics(self, x: StateVector, t: ScalarLike = 0.0) -> DerivativeVector:
        """
        Evaluate the vector field with statistics tracking.

        Notes
        -----
        This wrapper counts function evaluations for performance analysis.
        """
        self._stats["total_fev"] += 1
        return np.asarray(self.system(x, self.params, t), dtype=float)

    @staticmethod
    def _validate_time_span(t_span: TimeSpan):
        t0, tf = float(t_span[0]), float(t_span[1])
        if not np.isfinite(t0) or not np.isfinite(tf):
            raise ValueError(f"t_span must be finite, got {t_span}")
        if tf <= t0:
            raise ValueError(f"t_span must satisfy t_start < t_end, got {t_span}")
        return t0, tf

    @contextmanager
    def _profiled(self, record: Dict[str, Any]):
        """
        Time a block and, if enabled, trace its peak memory.

        Fills ``record`` with 'integration_time' and, with
        ``track_memory``, 'peak_memory' in bytes.
        """
        started_tracing = False
        if self.track_memory:
            if not tracemalloc.is_tracing():
                tracemalloc.start()
                started_tracing = True
            tracemalloc.reset_peak()

        start_time = time.time()
        try:
            yield record
        finally:
            elapsed = time.time() - start_time
            record["integration_time"] = elapsed
            self._stats["total_time"] += elapsed

            if self.track_memory:
                _, peak = tracemalloc.get_traced_memory()
                record["peak_memory"] = int(peak)
                if started_tracing:
                    tracemalloc.stop()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get integration statistics.

        Returns
        -------
        dict
            Statistics with keys:
            - 'total_steps': Total integration steps taken
            - 'total_fev': Total function evaluations
            - 'total_time': Total integration time
            - 'avg_fev_per_step': Average function evaluations per step
        """
        avg_fev = self._stats["total_fev"] / max(1, self._stats["total_steps"])

        return {
            **self._stats,
            "avg_fev_per_step": avg_fev,
        }

    def reset_stats(self):
        """
        Reset integration statistics to zero.

        Examples
        --------
        >>> integrator.reset_stats()
        >>> integrator.get_stats()['total_steps']
        0
        """
        self._stats["total_steps"] = 0
        self._stats["total_fev"] = 0
        self._stats["total_time"] = 0.0

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(dt={self.dt}, mode={self.step_mode.value})"

    def __str__(self) -> str:
        return f"{self.name} (dt={self.dt:.4f})"
