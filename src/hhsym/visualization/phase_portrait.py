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
Phase Portrait Plotter - State Space Visualization

Interactive Plotly-based phase space views of Hénon-Heiles orbits.

Main Class
----------
PhasePortraitPlotter : Phase space visualization
    plot_2d() : Any two state components against each other
    plot_configuration_space() : Orbit in the (x, y) plane inside the
        zero-velocity curve of its energy, with the saddles marked

Usage
-----
>>> plotter = PhasePortraitPlotter()
>>> result = simulate()
>>> fig = plotter.plot_2d(result["x"][:, [0, 2]], state_names=("x", "p_x"))
>>> fig = plotter.plot_configuration_space(result)
>>> fig.show()
"""

from typing import Callable, List, Optional, Tuple

import numpy as np
import plotly.graph_objects as go

from hhsym.analysis.potential_surface import make_grid, potential_surface
from hhsym.systems.builtin.henon_heiles import HenonHeiles
from hhsym.types.trajectories import IntegrationResult
from hhsym.visualization.themes import ColorSchemes


class PhasePortraitPlotter:
    """
    Phase space visualization for trajectories.

    Examples
    --------
    >>> plotter = PhasePortraitPlotter()
    >>> x = np.column_stack([np.sin(t), np.cos(t)])  # (T, 2)
    >>> fig = plotter.plot_2d(x, state_names=('sin', 'cos'))
    """

    def __init__(self, color_scheme: str = "plotly"):
        self.color_scheme = color_scheme

    # =========================================================================
    # Main Plotting Methods
    # =========================================================================

    def plot_2d(
        self,
        x: np.ndarray,
        state_names: Tuple[str, str] = ("x₁", "x₂"),
        show_direction: bool = True,
        show_start_end: bool = True,
        vector_field: Optional[Callable] = None,
        equilibria: Optional[List[np.ndarray]] = None,
        title: str = "2D Phase Portrait",
        trace_names: Optional[List[str]] = None,
    ) -> go.Figure:
        """
        Create 2D phase portrait (x₂ vs x₁).

        Parameters
        ----------
        x : np.ndarray
            Trajectory, shape (T, 2) or (n_batch, T, 2)
        state_names : Tuple[str, str]
            Axis titles
        show_direction : bool
            Add arrows showing the direction of motion
        show_start_end : bool
            Mark initial (green circle) and final (red square) points
        vector_field : Optional[Callable]
            f(x1, x2) -> [dx1, dx2]; drawn as normalized arrows on a grid
        equilibria : Optional[List[np.ndarray]]
            Points to mark, each shape (2,)
        title : str
            Plot title
        trace_names : Optional[List[str]]
            Legend names, one per trajectory

        Returns
        -------
        go.Figure

        Raises
        ------
        ValueError
            If the last dimension is not 2 or x is 1D
        """
        x_np = np.asarray(x, dtype=float)

        if x_np.shape[-1] != 2:
            raise ValueError(
                f"plot_2d requires 2D state, got shape {x_np.shape} (last dim should be 2)"
            )
        if x_np.ndim == 1:
            raise ValueError("plot_2d requires at least 2D array (T, 2)")

        is_batched = x_np.ndim == 3
        if not is_batched:
            x_np = x_np[np.newaxis, :, :]
        n_batch, T, _ = x_np.shape

        colors = ColorSchemes.get_colors(self.color_scheme, n_batch)
        if trace_names is None:
            trace_names = (
                [f"Trajectory {i + 1}" for i in range(n_batch)] if is_batched else ["Trajectory"]
            )

        fig = go.Figure()

        if vector_field is not None:
            self._add_vector_field_2d(fig, vector_field, x_np, grid_density=15)

        if equilibria:
            self._add_equilibria_markers(fig, equilibria)

        for batch_idx in range(n_batch):
            x_traj = x_np[batch_idx]

            fig.add_trace(
                go.Scatter(
                    x=x_traj[:, 0],
                    y=x_traj[:, 1],
                    mode="lines",
                    name=trace_names[batch_idx],
                    line=dict(color=colors[batch_idx], width=1.5),
                    showlegend=True,
                )
            )

            if show_start_end:
                self._add_start_end_markers(fig, x_traj, show_legend=(batch_idx == 0))

            if show_direction and T > 10:
                self._add_direction_arrows_2d(fig, x_traj, colors[batch_idx], n_arrows=5)

        fig.update_layout(
            title=title,
            xaxis_title=state_names[0],
            yaxis_title=state_names[1],
            template="plotly_white",
            width=700,
            height=600,
            showlegend=True,
        )

        # Equal aspect ratio for phase portraits
        fig.update_yaxes(scaleanchor="x", scaleratio=1)

        return fig

    def plot_configuration_space(
        self,
        result: IntegrationResult,
        system: Optional[HenonHeiles] = None,
        show_boundary: bool = True,
        show_saddles: bool = True,
        title: str = "Hénon-Heiles Orbit in the (x, y) Plane",
    ) -> go.Figure:
        """
        Plot the orbit's (x, y) projection.

        The zero-velocity curve V(x, y) = H(x₀) bounds the region the
        orbit can reach; it is drawn as a single contour line.

        Parameters
        ----------
        result : IntegrationResult
            Trajectory of the 4D system
        system : HenonHeiles, optional
            System for energy and saddles (default coupling if omitted)
        show_boundary : bool
            Draw the zero-velocity curve
        show_saddles : bool
            Mark the three saddle points
        title : str
            Plot title
        """
        system = system or HenonHeiles()
        states = np.asarray(result["x"], dtype=float)

        saddles = []
        if show_saddles:
            saddles = [
                system.get_equilibrium(name)[:2]
                for name in system.list_equilibria()
                if name.startswith("saddle")
            ]

        fig = self.plot_2d(
            states[:, :2],
            state_names=("x", "y"),
            show_direction=False,
            equilibria=saddles,
            title=title,
        )

        if show_boundary:
            energy = system.hamiltonian(states[0])
            self._add_zero_velocity_curve(fig, system, energy, states)

        return fig

    # =========================================================================
    # Helper Methods (Internal)
    # =========================================================================

    def _add_zero_velocity_curve(
        self, fig: go.Figure, system: HenonHeiles, energy: float, states: np.ndarray
    ) -> None:
        """Add the V(x, y) = energy contour around the orbit."""
        extent = max(1.2 * np.max(np.abs(states[:, :2])), 0.1)
        axis = make_grid(-extent, extent, extent / 50.0)
        V = potential_surface(axis, axis, system.potential)

        fig.add_trace(
            go.Contour(
                x=axis,
                y=axis,
                # Contour expects z[row=y, col=x]
                z=V.T,
                contours=dict(start=energy, end=energy, size=1.0, coloring="lines"),
                line=dict(color="gray", width=2, dash="dash"),
                showscale=False,
                name=f"V = {energy:.4g}",
                showlegend=True,
            )
        )

    def _add_start_end_markers(self, fig: go.Figure, x_traj: np.ndarray, show_legend: bool):
        fig.add_trace(
            go.Scatter(
                x=[x_traj[0, 0]],
                y=[x_traj[0, 1]],
                mode="markers",
                name="Start",
                marker=dict(color="green", size=10, symbol="circle"),
                showlegend=show_legend,
            )
        )
        fig.add_trace(
            go.Scatter(
                x=[x_traj[-1, 0]],
                y=[x_traj[-1, 1]],
                mode="markers",
                name="End",
                marker=dict(color="red", size=10, symbol="square"),
                showlegend=show_legend,
            )
        )

    def _add_vector_field_2d(
        self,
        fig: go.Figure,
        f: Callable,
        x_trajectories: np.ndarray,
        grid_density: int = 15,
    ) -> None:
        """
        Add normalized direction arrows on a grid covering the trajectories.

        Parameters
        ----------
        f : Callable
            Dynamics f(x1, x2) -> [dx1, dx2]
        x_trajectories : np.ndarray
            Shape (n_batch, T, 2), used for the plot bounds
        """
        x1_all = x_trajectories[:, :, 0].ravel()
        x2_all = x_trajectories[:, :, 1].ravel()

        x1_range = max(x1_all.max() - x1_all.min(), 1e-6)
        x2_range = max(x2_all.max() - x2_all.min(), 1e-6)

        x1_grid = np.linspace(x1_all.min() - 0.1 * x1_range, x1_all.max() + 0.1 * x1_range, grid_density)
        x2_grid = np.linspace(x2_all.min() - 0.1 * x2_range, x2_all.max() + 0.1 * x2_range, grid_density)
        scale = 0.03 * min(x1_range, x2_range)

        for x1 in x1_grid:
            for x2 in x2_grid:
                vec = f(x1, x2)
                dx1, dx2 = vec[0], vec[1]

                mag = np.hypot(dx1, dx2)
                if not np.isfinite(mag) or mag <= 1e-10:
                    continue

                fig.add_annotation(
                    x=x1 + dx1 / mag * scale,
                    y=x2 + dx2 / mag * scale,
                    ax=x1,
                    ay=x2,
                    xref="x",
                    yref="y",
                    axref="x",
                    ayref="y",
                    showarrow=True,
                    arrowhead=2,
                    arrowsize=1,
                    arrowwidth=1,
                    arrowcolor="rgba(128, 128, 128, 0.4)",
                )

    def _add_equilibria_markers(self, fig: go.Figure, equilibria: List[np.ndarray]) -> None:
        points = np.asarray(equilibria, dtype=float).reshape(-1, 2)
        fig.add_trace(
            go.Scatter(
                x=points[:, 0],
                y=points[:, 1],
                mode="markers",
                name="Equilibria",
                marker=dict(color="black", size=12, symbol="x"),
                showlegend=True,
            )
        )

    def _add_direction_arrows_2d(
        self, fig: go.Figure, x_traj: np.ndarray, color: str, n_arrows: int = 5
    ) -> None:
        T = x_traj.shape[0]
        indices = np.linspace(0, T - 2, n_arrows, dtype=int)

        for idx in indices:
            x1_start, x2_start = x_traj[idx]
            x1_end, x2_end = x_traj[idx + 1]

            fig.add_annotation(
                x=x1_end,
                y=x2_end,
                ax=x1_start,
                ay=x2_start,
                xref="x",
                yref="y",
                axref="x",
                ayref="y",
                showarrow=True,
                arrowhead=2,
                arrowsize=1.5,
                arrowwidth=2,
                arrowcolor=color,
            )


__all__ = ["PhasePortraitPlotter"]
