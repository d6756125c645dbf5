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
Command-line entry point.

    python -m hhsym                          # default run, text summary
    python -m hhsym --solver implicit_stiff --t-end 100
    python -m hhsym --compare --t-end 100    # all three presets side by side
    python -m hhsym --config run.json --json
    python -m hhsym --plot figures/          # write HTML figures
"""

import argparse
import json
import os
import sys
from typing import Any, Dict, List, Optional

import numpy as np

from hhsym.simulation import (
    SimulationConfig,
    compare_solvers,
    compute_potential_field,
    energy_error,
    format_comparison,
    simulate,
)
from hhsym.systems.base.numerical_integration.integrator_base import IntegrationError
from hhsym.systems.base.numerical_integration.method_registry import ALL_METHODS, SolverPreset
from hhsym.systems.builtin.henon_heiles import HenonHeiles
from hhsym.visualization import PhasePortraitPlotter, PotentialPlotter, TrajectoryPlotter


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    choices = [p.value for p in SolverPreset] + sorted(ALL_METHODS)

    parser = argparse.ArgumentParser(
        prog="hhsym", description="Integrate the Hénon-Heiles system"
    )
    parser.add_argument("--config", default=None, help="SimulationConfig JSON file")
    parser.add_argument(
        "--solver", default=None, help=f"Solver preset or method ({', '.join(choices)})"
    )
    parser.add_argument("--t-end", type=float, default=None, help="End of the time span")
    parser.add_argument("--rtol", type=float, default=None, help="Relative tolerance")
    parser.add_argument("--atol", type=float, default=None, help="Absolute tolerance")
    parser.add_argument("--dt", type=float, default=None, help="Step for fixed-step solvers")
    parser.add_argument(
        "--samples", type=int, default=None, help="Store the solution on N evenly spaced times"
    )
    parser.add_argument("--lam", type=float, default=None, help="Coupling strength")
    parser.add_argument(
        "--track-memory", action="store_true", help="Report peak memory of the integration"
    )
    parser.add_argument(
        "--compare", action="store_true", help="Run all recognized presets and compare them"
    )
    parser.add_argument("--json", action="store_true", help="Print a JSON summary")
    parser.add_argument("--plot", metavar="DIR", default=None, help="Write HTML figures to DIR")
    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> SimulationConfig:
    if args.compare and (args.solver is not None or args.dt is not None):
        raise ValueError(
            "--compare runs the recognized presets and takes neither --solver nor --dt"
        )

    config = SimulationConfig.load(args.config) if args.config else SimulationConfig()

    changes: Dict[str, Any] = {}
    if args.solver is not None:
        changes["solver"] = args.solver
    if args.t_end is not None:
        changes["t_span"] = (config.t_span[0], args.t_end)
    if args.rtol is not None:
        changes["rtol"] = args.rtol
    if args.atol is not None:
        changes["atol"] = args.atol
    if args.dt is not None:
        changes["dt"] = args.dt
    if args.samples is not None:
        changes["n_samples"] = args.samples
    if args.lam is not None:
        changes["lam"] = args.lam
    if args.track_memory:
        changes["track_memory"] = True

    return config.replace(**changes) if changes else config


def _run_summary(config: SimulationConfig, result, system: HenonHeiles) -> Dict[str, Any]:
    summary = {
        "solver": result["solver"],
        "method": config.method,
        "t_span": list(config.t_span),
        "n_points": int(len(result["t"])),
        "nfev": int(result["nfev"]),
        "njev": int(result.get("njev", 0)),
        "nlu": int(result.get("nlu", 0)),
        "nsteps": int(result["nsteps"]),
        "integration_time": float(result["integration_time"]),
        "initial_energy": float(system.hamiltonian(result["x"][0])),
        "energy_error": energy_error(result, system),
        "final_state": np.asarray(result["x"][-1]).tolist(),
    }
    if "peak_memory" in result:
        summary["peak_memory"] = int(result["peak_memory"])
    return summary


def _write_figures(directory: str, result, system: HenonHeiles, comparison=None) -> List[str]:
    os.makedirs(directory, exist_ok=True)
    X, Y, V = compute_potential_field()
    trajectories = TrajectoryPlotter()

    figures = {
        "trajectory.html": trajectories.plot_trajectory(result),
        "energy.html": trajectories.plot_energy(
            comparison["results"] if comparison else result, energy_fn=system.hamiltonian
        ),
        "configuration_space.html": PhasePortraitPlotter().plot_configuration_space(
            result, system
        ),
        "potential_contour.html": PotentialPlotter().plot_contour(
            X, Y, V, trajectory=result["x"]
        ),
        "potential_surface.html": PotentialPlotter().plot_surface(X, Y, V),
    }
    if comparison:
        figures["solver_comparison.html"] = trajectories.plot_solver_comparison(comparison)

    written = []
    for filename, fig in figures.items():
        path = os.path.join(directory, filename)
        fig.write_html(path)
        written.append(path)
    return written


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)

    try:
        config = _build_config(args)
    except (ValueError, TypeError, OSError) as e:
        print(f"hhsym: invalid configuration: {e}", file=sys.stderr)
        return 2

    system = HenonHeiles(lam=config.lam)

    try:
        if args.compare:
            comparison = compare_solvers(config)
            reference = comparison["results"][comparison["reference"]]
            result = reference
        else:
            comparison = None
            result = simulate(config, system=system)
    except IntegrationError as e:
        print(f"hhsym: integration failed: {e}", file=sys.stderr)
        return 1

    if args.json:
        if comparison:
            payload = {
                "reference": comparison["reference"],
                "summaries": comparison["summaries"],
            }
        else:
            payload = _run_summary(config, result, system)
        print(json.dumps(payload, indent=2))
    elif comparison:
        print(format_comparison(comparison))
    else:
        summary = _run_summary(config, result, system)
        print(f"Solver:          {summary['solver']}")
        print(f"Time span:       {config.t_span}")
        print(f"Samples:         {summary['n_points']}")
        print(f"Evaluations:     nfev={summary['nfev']} njev={summary['njev']} nlu={summary['nlu']}")
        print(f"Wall time:       {summary['integration_time']:.3f} s")
        if "peak_memory" in summary:
            print(f"Peak memory:     {summary['peak_memory'] / 1024:.1f} KiB")
        print(f"H(x0):           {summary['initial_energy']:.10f}")
        print(f"max |H - H(x0)|: {summary['energy_error']:.3e}")

    if args.plot:
        for path in _write_figures(args.plot, result, system, comparison):
            print(f"wrote {path}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
