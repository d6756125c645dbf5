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
Simulation Driver
=================

Thin orchestration around the system, the integrators and the potential
grid:

- ``simulate``: integrate Hénon-Heiles from a configured initial state
- ``compute_potential_field``: V(x, y) on the configured grid
- ``compare_solvers``: run several solver presets on the same problem and
  report their work counters, energy error and mutual agreement

Solver failures are never hidden: ``integrate_trajectory`` raises
IntegrationError instead of returning a truncated trajectory.

Usage
-----
>>> result = simulate()                       # u0 = (0.2, 0, 0.4, 0), t ∈ [0, 500]
>>> X, Y, V = compute_potential_field()      # 31 × 31 grid
>>> comparison = compare_solvers(SimulationConfig(t_span=(0.0, 100.0)))
>>> comparison["summaries"]["implicit_stiff"]["nlu"]
"""

import json
import warnings
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import numpy as np

from hhsym.analysis.potential_surface import (
    DEFAULT_GRID_BOUNDS,
    DEFAULT_GRID_STEP,
    make_grid,
    potential_surface,
)
from hhsym.systems.base.numerical_integration.integrator_base import IntegrationError
from hhsym.systems.base.numerical_integration.integrator_factory import IntegratorFactory
from hhsym.systems.base.numerical_integration.method_registry import (
    RECOGNIZED_PRESETS,
    SolverPreset,
    is_fixed_step,
    normalize_method_name,
)
from hhsym.systems.builtin.henon_heiles import HenonHeiles, hamiltonian
from hhsym.types.core import ArrayLike, InitialState, VectorFieldFunction
from hhsym.types.trajectories import (
    IntegrationResult,
    PotentialField,
    SolverComparison,
    SolverSummary,
    TimePoints,
    TimeSpan,
)

DEFAULT_INITIAL_STATE: InitialState = (0.2, 0.0, 0.4, 0.0)
DEFAULT_TIME_SPAN: TimeSpan = (0.0, 500.0)
DEFAULT_COMPARISON_SAMPLES = 5001


# ============================================================================
# Configuration
# ============================================================================


@dataclass
class SimulationConfig:
    """
    Run configuration for a single simulation.

    Attributes
    ----------
    x0 : tuple
        Initial state (x, y, p_x, p_y)
    t_span : tuple
        (t_start, t_end)
    solver : str
        Preset or method name (see method_registry)
    rtol, atol : float
        Adaptive tolerances
    dt : float, optional
        Step for fixed-step methods (required for them)
    n_samples : int, optional
        Store the solution on this many evenly spaced times instead of the
        solver's own steps
    max_step : float, optional
        Upper bound on adaptive step size
    track_memory : bool
        Record peak traced memory of the integration call
    lam : float
        Hénon-Heiles coupling strength
    """

    x0: InitialState = DEFAULT_INITIAL_STATE
    t_span: TimeSpan = DEFAULT_TIME_SPAN
    solver: str = SolverPreset.ADAPTIVE_DEFAULT.value
    rtol: float = 1e-8
    atol: float = 1e-10
    dt: Optional[float] = None
    n_samples: Optional[int] = None
    max_step: Optional[float] = None
    track_memory: bool = False
    lam: float = 1.0

    def __post_init__(self):
        self.x0 = tuple(float(v) for v in self.x0)
        self.t_span = (float(self.t_span[0]), float(self.t_span[1]))

        if isinstance(self.solver, SolverPreset):
            self.solver = self.solver.value

        if len(self.x0) != 4:
            raise ValueError(f"x0 must have 4 components (x, y, p_x, p_y), got {len(self.x0)}")
        if self.t_span[1] <= self.t_span[0]:
            raise ValueError(f"t_span must satisfy t_start < t_end, got {self.t_span}")

        method = normalize_method_name(self.solver)
        if is_fixed_step(method) and self.dt is None:
            raise ValueError(f"Solver '{self.solver}' is fixed-step and requires dt")
        if self.n_samples is not None and self.n_samples < 2:
            raise ValueError(f"n_samples must be at least 2, got {self.n_samples}")

    @property
    def method(self) -> str:
        """Concrete method name the solver setting resolves to."""
        return normalize_method_name(self.solver)

    def t_eval(self) -> Optional[np.ndarray]:
        """Evenly spaced output times, or None to keep the solver's steps."""
        if self.n_samples is None:
            return None
        return np.linspace(self.t_span[0], self.t_span[1], self.n_samples)

    def integrator_options(self) -> Dict[str, Any]:
        """Options forwarded to IntegratorFactory.create()."""
        options: Dict[str, Any] = {
            "rtol": self.rtol,
            "atol": self.atol,
            "track_memory": self.track_memory,
        }
        if self.dt is not None:
            options["dt"] = self.dt
        if self.max_step is not None:
            options["max_step"] = self.max_step
        return options

    def replace(self, **changes) -> "SimulationConfig":
        """Copy with some fields changed."""
        values = self.to_dict()
        values.update(changes)
        return SimulationConfig.from_dict(values)

    def to_dict(self) -> Dict[str, Any]:
        values = asdict(self)
        values["x0"] = list(self.x0)
        values["t_span"] = list(self.t_span)
        return values

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "SimulationConfig":
        known = {f for f in cls.__dataclass_fields__}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**values)

    def save(self, filename: str):
        """Save configuration to JSON file."""
        with open(filename, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, filename: str) -> "SimulationConfig":
        """Load configuration from JSON file."""
        with open(filename) as f:
            return cls.from_dict(json.load(f))


@dataclass
class GridConfig:
    """Bounds and spacing of the potential grid (same for both axes)."""

    lower: float = DEFAULT_GRID_BOUNDS[0]
    upper: float = DEFAULT_GRID_BOUNDS[1]
    step: float = DEFAULT_GRID_STEP

    def axis(self) -> np.ndarray:
        return make_grid(self.lower, self.upper, self.step)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


# ============================================================================
# Integration
# ============================================================================


def integrate_trajectory(
    system: VectorFieldFunction,
    x0: ArrayLike,
    t_span: TimeSpan,
    solver: Union[str, SolverPreset] = SolverPreset.ADAPTIVE_DEFAULT,
    t_eval: Optional[TimePoints] = None,
    **options,
) -> IntegrationResult:
    """
    Integrate a vector field with the selected solver.

    Parameters
    ----------
    system : VectorFieldFunction
        Vector field ``system(x, p, t)``
    x0 : array_like
        Initial state
    t_span : tuple
        (t_start, t_end)
    solver : str or SolverPreset
        Preset or method name
    t_eval : array_like, optional
        Output times
    **options
        Integrator options (rtol, atol, dt, max_step, track_memory, ...)

    Returns
    -------
    IntegrationResult
        Complete trajectory

    Raises
    ------
    IntegrationError
        If the solver reports failure. The partial result is attached.
    ValueError
        For an unknown solver or invalid options
    """
    integrator = IntegratorFactory.create(system, method=solver, **options)
    result = integrator.integrate(np.asarray(x0, dtype=float), t_span, t_eval=t_eval)

    if not result["success"]:
        reached = result["t"][-1] if len(result["t"]) else t_span[0]
        raise IntegrationError(
            f"{integrator.name} failed at t={reached:.6g} of {t_span}: {result['message']}",
            result=result,
        )

    return result


def simulate(
    config: Optional[SimulationConfig] = None, system: Optional[HenonHeiles] = None
) -> IntegrationResult:
    """
    Integrate the Hénon-Heiles system.

    Parameters
    ----------
    config : SimulationConfig, optional
        Defaults: u0 = (0.2, 0, 0.4, 0), t ∈ [0, 500], adaptive_default
    system : HenonHeiles, optional
        Pre-built system (otherwise built from ``config.lam``)

    Returns
    -------
    IntegrationResult
        The trajectory

    Raises
    ------
    IntegrationError
        If the solver fails (e.g. an escaping orbit diverges)

    Warns
    -----
    RuntimeWarning
        If the initial energy is at or above the escape energy
    """
    config = config or SimulationConfig()
    system = system or HenonHeiles(lam=config.lam)

    energy = system.hamiltonian(np.asarray(config.x0))
    if energy >= system.escape_energy:
        warnings.warn(
            f"Initial energy H={energy:.4g} is at or above the escape energy "
            f"{system.escape_energy:.4g}; the orbit may leave the potential well",
            RuntimeWarning,
        )

    return integrate_trajectory(
        system,
        config.x0,
        config.t_span,
        solver=config.solver,
        t_eval=config.t_eval(),
        **config.integrator_options(),
    )


def compute_potential_field(
    grid: Optional[GridConfig] = None,
) -> Tuple[np.ndarray, np.ndarray, PotentialField]:
    """
    Potential on the configured grid.

    Returns
    -------
    X, Y, V
        Axes and the (len(X), len(Y)) field
    """
    grid = grid or GridConfig()
    X = grid.axis()
    Y = grid.axis()
    return X, Y, potential_surface(X, Y)


# ============================================================================
# Diagnostics
# ============================================================================


def energy_error(result: IntegrationResult, system: Optional[HenonHeiles] = None) -> float:
    """
    Maximum |H(x_k) - H(x_0)| along a trajectory.

    Uses the standard Hamiltonian unless a system is given.
    """
    if system is not None:
        return system.energy_error(result["x"])
    energies = hamiltonian(result["x"])
    return float(np.max(np.abs(energies - energies[0])))


def max_state_deviation(result_a: IntegrationResult, result_b: IntegrationResult) -> float:
    """
    Maximum pointwise state difference at matching sample times.

    Raises
    ------
    ValueError
        If the two trajectories were not sampled on the same times
    """
    t_a = np.asarray(result_a["t"])
    t_b = np.asarray(result_b["t"])
    if t_a.shape != t_b.shape or not np.allclose(t_a, t_b, rtol=0.0, atol=1e-12):
        raise ValueError(
            "Trajectories must share sample times; integrate both with the same t_eval"
        )
    return float(np.max(np.abs(np.asarray(result_a["x"]) - np.asarray(result_b["x"]))))


def _summarize(method: str, result: IntegrationResult, system: HenonHeiles) -> SolverSummary:
    summary: SolverSummary = {
        "solver": result["solver"],
        "method": method,
        "success": result["success"],
        "nfev": int(result["nfev"]),
        "njev": int(result.get("njev", 0)),
        "nlu": int(result.get("nlu", 0)),
        "nsteps": int(result["nsteps"]),
        "integration_time": float(result["integration_time"]),
        "energy_error": energy_error(result, system),
    }
    if "peak_memory" in result:
        summary["peak_memory"] = int(result["peak_memory"])
    return summary


def compare_solvers(
    config: Optional[SimulationConfig] = None,
    solvers: Sequence[Union[str, SolverPreset]] = tuple(RECOGNIZED_PRESETS),
) -> SolverComparison:
    """
    Run several solvers on the same problem and sample times.

    The first solver is the reference for ``max_deviation``. Any solver
    failure propagates as IntegrationError.

    Parameters
    ----------
    config : SimulationConfig, optional
        Shared settings. If it has no n_samples, 5001 evenly spaced
        samples are used so the trajectories can be compared pointwise.
    solvers : sequence
        Presets or method names; defaults to the three recognized presets

    Returns
    -------
    SolverComparison
        Per-solver summaries and trajectories

    Notes
    -----
    At the default energy (H = 0.1) the system is not stiff: the explicit
    low-order method is expected to need far less work than the implicit
    one (no Jacobians, no LU decompositions) while the trajectories agree
    to within the tolerances.
    """
    config = config or SimulationConfig()
    if not solvers:
        raise ValueError("At least one solver is required")
    if config.n_samples is None:
        config = config.replace(n_samples=DEFAULT_COMPARISON_SAMPLES)

    system = HenonHeiles(lam=config.lam)

    summaries: Dict[str, SolverSummary] = {}
    results: Dict[str, IntegrationResult] = {}
    reference = None

    for solver in solvers:
        key = solver.value if isinstance(solver, SolverPreset) else str(solver)
        run_config = config.replace(solver=key)
        result = simulate(run_config, system=system)

        summary = _summarize(run_config.method, result, system)
        if reference is None:
            reference = key
            summary["max_deviation"] = 0.0
        else:
            summary["max_deviation"] = max_state_deviation(results[reference], result)

        summaries[key] = summary
        results[key] = result

    return {
        "reference": reference,
        "t": config.t_eval(),
        "summaries": summaries,
        "results": results,
    }


def format_comparison(comparison: SolverComparison) -> str:
    """Render a comparison as a fixed-width table."""
    header = (
        f"{'preset':<20}{'method':<8}{'nfev':>9}{'njev':>7}{'nlu':>7}"
        f"{'time [s]':>11}{'peak mem':>12}{'|dH|':>11}{'max dev':>11}"
    )
    lines = [header, "-" * len(header)]
    for key, s in comparison["summaries"].items():
        peak = f"{s['peak_memory'] / 1024:.0f} KiB" if "peak_memory" in s else "-"
        lines.append(
            f"{key:<20}{s['method']:<8}{s['nfev']:>9}{s['njev']:>7}{s['nlu']:>7}"
            f"{s['integration_time']:>11.3f}{peak:>12}{s['energy_error']:>11.2e}"
            f"{s['max_deviation']:>11.2e}"
        )
    return "\n".join(lines)
