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
Trajectory and Result Types

Result types are TypedDict. Time-major ordering throughout:
- t: (T,) time points
- x: (T, nx) states, so x[:, i] is the i-th component over time
"""

from typing import Any, Dict, List, Tuple

import numpy as np
from typing_extensions import TypedDict

from hhsym.types.core import ArrayLike

# ============================================================================
# Time Types
# ============================================================================

TimePoints = ArrayLike
"""
Array of time points at which a solution is stored.

Shape: (n_points,), monotonically increasing.
"""

TimeSpan = Tuple[float, float]
"""
Time interval for continuous integration: (t_start, t_end).

Format: (t_start, t_end) where t_start < t_end

Examples
--------
>>> t_span: TimeSpan = (0.0, 500.0)
"""

StateTrajectory = np.ndarray
"""
State trajectory over time, shape (T, nx).

Each row is x(t_k).
"""

# ============================================================================
# Integration Results
# ============================================================================


class IntegrationResult(TypedDict, total=False):
    """
    Result from continuous-time integration (the Trajectory).

    Contains trajectory, time points, and solver diagnostics.

    Attributes
    ----------
    t : np.ndarray
        Time points (T,)
    x : np.ndarray
        State trajectory (T, nx) - time-major ordering
    success : bool
        Whether integration succeeded
    message : str
        Status message
    nfev : int
        Number of function evaluations
    nsteps : int
        Number of integration steps
    integration_time : float
        Computation time in seconds
    solver : str
        Name of solver used

    Optional Fields
    ---------------
    njev : int
        Number of Jacobian evaluations (implicit methods)
    nlu : int
        Number of LU decompositions (implicit methods)
    status : int
        Solver-specific status code
    sol : Any
        Dense output object (solver-specific)
    dense_output : bool
        Whether dense output is available
    peak_memory : int
        Peak traced memory in bytes during the call (``track_memory=True``)
    t_events : List[np.ndarray]
        Event times per event function (when events were requested)
    x_events : List[np.ndarray]
        States at the event times

    Examples
    --------
    >>> result: IntegrationResult = integrator.integrate(
    ...     x0=np.array([0.2, 0.0, 0.4, 0.0]),
    ...     t_span=(0.0, 500.0),
    ... )
    >>> x_pos, y_pos = result["x"][:, 0], result["x"][:, 1]
    >>> if result["success"]:
    ...     print(f"Completed in {result['integration_time']:.3f}s")
    """

    t: np.ndarray
    x: StateTrajectory
    success: bool
    message: str
    nfev: int
    nsteps: int
    integration_time: float
    solver: str
    # Optional fields
    njev: int
    nlu: int
    status: int
    sol: Any
    dense_output: bool
    peak_memory: int
    t_events: List[np.ndarray]
    x_events: List[np.ndarray]


class SolverSummary(TypedDict, total=False):
    """
    Work and accuracy summary of one solver run.

    Attributes
    ----------
    solver : str
        Integrator display name
    method : str
        Resolved method name (e.g. 'RK23')
    success : bool
        Whether the run succeeded
    nfev, njev, nlu, nsteps : int
        Work counters reported by the solver
    integration_time : float
        Wall time in seconds
    peak_memory : int
        Peak traced memory in bytes (only when tracked)
    energy_error : float
        max |H(x_k) - H(x_0)| along the trajectory
    max_deviation : float
        Max pointwise state deviation from the reference solver
    """

    solver: str
    method: str
    success: bool
    nfev: int
    njev: int
    nlu: int
    nsteps: int
    integration_time: float
    peak_memory: int
    energy_error: float
    max_deviation: float


class SolverComparison(TypedDict):
    """
    Result of running several solvers on the same problem.

    Attributes
    ----------
    reference : str
        Preset used as the deviation reference (first one run)
    t : np.ndarray
        Shared sample times
    summaries : Dict[str, SolverSummary]
        Preset name → summary
    results : Dict[str, IntegrationResult]
        Preset name → full trajectory
    """

    reference: str
    t: np.ndarray
    summaries: Dict[str, SolverSummary]
    results: Dict[str, IntegrationResult]


# ============================================================================
# Potential Surface Types
# ============================================================================

GridAxis = np.ndarray
"""Ordered 1-D array of sample coordinates along one grid axis."""

PotentialField = np.ndarray
"""
Potential sampled on a grid, shape (len(X), len(Y)).

Cell (i, j) holds V(X[i], Y[j]).
"""


__all__ = [
    "TimePoints",
    "TimeSpan",
    "StateTrajectory",
    "IntegrationResult",
    "SolverSummary",
    "SolverComparison",
    "GridAxis",
    "PotentialField",
]
