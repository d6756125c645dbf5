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
Trajectory Plotter - Time Series Visualization

Plotly figures for integration results:

- plot_trajectory() : each state component against time
- plot_energy() : energy drift |H(t) - H(0)| for one or several runs
- plot_solver_comparison() : work counters and accuracy per solver

Usage
-----
>>> plotter = TrajectoryPlotter()
>>> fig = plotter.plot_trajectory(simulate())
>>> comparison = compare_solvers()
>>> fig = plotter.plot_energy(comparison["results"])
>>> fig = plotter.plot_solver_comparison(comparison)
"""

from typing import Dict, Optional, Sequence, Union

import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from hhsym.systems.builtin.henon_heiles import hamiltonian
from hhsym.types.trajectories import IntegrationResult, SolverComparison
from hhsym.visualization.themes import ColorSchemes, PlotThemes

STATE_NAMES = ("x", "y", "p_x", "p_y")


class TrajectoryPlotter:
    """
    Time-domain plots of integration results.

    Parameters
    ----------
    color_scheme : str
        Palette name from ColorSchemes
    theme : str
        Theme name from PlotThemes
    """

    def __init__(self, color_scheme: str = "plotly", theme: str = "default"):
        self.color_scheme = color_scheme
        self.theme = theme

    def plot_trajectory(
        self,
        result: IntegrationResult,
        state_names: Sequence[str] = STATE_NAMES,
        title: str = "State Trajectories",
    ) -> go.Figure:
        """
        Plot every state component in its own row, sharing the time axis.

        Raises
        ------
        ValueError
            If the number of names does not match the state dimension
        """
        t = np.asarray(result["t"])
        x = np.asarray(result["x"])
        if x.ndim != 2 or x.shape[1] != len(state_names):
            raise ValueError(
                f"Expected trajectory of shape (T, {len(state_names)}), got {x.shape}"
            )

        nx = x.shape[1]
        colors = ColorSchemes.get_colors(self.color_scheme, nx)
        fig = make_subplots(rows=nx, cols=1, shared_xaxes=True, subplot_titles=list(state_names))

        for i, name in enumerate(state_names):
            fig.add_trace(
                go.Scatter(
                    x=t,
                    y=x[:, i],
                    mode="lines",
                    name=name,
                    line=dict(color=colors[i], width=1.5),
                ),
                row=i + 1,
                col=1,
            )
            fig.update_yaxes(title_text=name, row=i + 1, col=1)

        fig.update_xaxes(title_text="Time", row=nx, col=1)
        fig.update_layout(title=title, height=220 * nx, width=900, showlegend=False)

        return PlotThemes.apply_theme(fig, self.theme)

    def plot_energy(
        self,
        results: Union[IntegrationResult, Dict[str, IntegrationResult]],
        energy_fn=hamiltonian,
        log_scale: bool = True,
        title: str = "Energy Error",
    ) -> go.Figure:
        """
        Plot |H(t) - H(0)| for one result or a name -> result mapping.

        On a log axis the first sample (exactly zero) is dropped.

        Parameters
        ----------
        results : IntegrationResult or dict
            Runs to plot
        energy_fn : callable
            Maps (T, 4) states to (T,) energies
        log_scale : bool
            Logarithmic y-axis
        """
        if "x" in results and "t" in results:
            results = {results.get("solver", "trajectory"): results}

        colors = ColorSchemes.get_colors(self.color_scheme, len(results))
        fig = go.Figure()

        for color, (name, result) in zip(colors, results.items()):
            t = np.asarray(result["t"])
            energies = np.asarray(energy_fn(result["x"]), dtype=float)
            error = np.abs(energies - energies[0])
            if log_scale:
                t, error = t[1:], error[1:]

            fig.add_trace(
                go.Scatter(x=t, y=error, mode="lines", name=name, line=dict(color=color, width=1.5))
            )

        fig.update_layout(
            title=title,
            xaxis_title="Time",
            yaxis_title="|H(t) - H(0)|",
            width=900,
            height=450,
            showlegend=True,
        )
        if log_scale:
            fig.update_yaxes(type="log")

        return PlotThemes.apply_theme(fig, self.theme)

    def plot_solver_comparison(
        self, comparison: SolverComparison, title: Optional[str] = None
    ) -> go.Figure:
        """
        Bar charts of function evaluations, wall time and energy error.
        """
        summaries = comparison["summaries"]
        names = list(summaries)
        colors = ColorSchemes.get_colors(self.color_scheme, len(names))

        panels = [
            ("nfev", "Function Evaluations", False),
            ("integration_time", "Wall Time [s]", False),
            ("energy_error", "Max |ΔH|", True),
        ]
        fig = make_subplots(rows=1, cols=len(panels), subplot_titles=[p[1] for p in panels])

        for col, (key, label, log_axis) in enumerate(panels, start=1):
            fig.add_trace(
                go.Bar(
                    x=names,
                    y=[summaries[n][key] for n in names],
                    marker_color=colors,
                    name=label,
                ),
                row=1,
                col=col,
            )
            if log_axis:
                fig.update_yaxes(type="log", row=1, col=col)

        fig.update_layout(
            title=title or f"Solver Comparison (reference: {comparison['reference']})",
            width=1100,
            height=420,
            showlegend=False,
        )

        return PlotThemes.apply_theme(fig, self.theme)


__all__ = ["TrajectoryPlotter", "STATE_NAMES"]
