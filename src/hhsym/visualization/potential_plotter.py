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
Potential Plotter - Contour and Surface Views of V(x, y)

Usage
-----
>>> X, Y, V = compute_potential_field()
>>> plotter = PotentialPlotter()
>>> fig = plotter.plot_contour(X, Y, V, trajectory=simulate()["x"])
>>> fig = plotter.plot_surface(X, Y, V)
"""

from typing import Optional

import numpy as np
import plotly.graph_objects as go

from hhsym.analysis.potential_surface import energy_contour_levels
from hhsym.systems.builtin.henon_heiles import ESCAPE_ENERGY
from hhsym.visualization.themes import ColorSchemes, PlotThemes


def _check_field(X: np.ndarray, Y: np.ndarray, V: np.ndarray):
    if V.shape != (X.size, Y.size):
        raise ValueError(
            f"Potential field shape {V.shape} does not match axes ({X.size}, {Y.size})"
        )


class PotentialPlotter:
    """
    Plots of a potential sampled on a grid.

    V is indexed V[i, j] = V(X[i], Y[j]), as returned by
    ``potential_surface``. Plotly wants rows along y, so the field is
    transposed on the way in.
    """

    def __init__(self, colorscale: str = ColorSchemes.POTENTIAL, theme: str = "default"):
        self.colorscale = colorscale
        self.theme = theme

    def plot_contour(
        self,
        X: np.ndarray,
        Y: np.ndarray,
        V: np.ndarray,
        levels: Optional[np.ndarray] = None,
        trajectory: Optional[np.ndarray] = None,
        title: str = "Hénon-Heiles Potential",
    ) -> go.Figure:
        """
        Filled contour plot of V with optional orbit overlay.

        Parameters
        ----------
        X, Y : np.ndarray
            Grid axes
        V : np.ndarray
            Field of shape (len(X), len(Y))
        levels : np.ndarray, optional
            Evenly spaced contour levels; defaults to ten levels up to the
            escape energy
        trajectory : np.ndarray, optional
            States (T, >= 2); the first two columns are drawn as x, y
        title : str
            Plot title
        """
        X, Y, V = np.asarray(X), np.asarray(Y), np.asarray(V)
        _check_field(X, Y, V)

        if levels is None:
            levels = energy_contour_levels(include_escape=False)
        levels = np.asarray(levels, dtype=float)
        size = float(levels[1] - levels[0]) if levels.size > 1 else ESCAPE_ENERGY

        fig = go.Figure()
        fig.add_trace(
            go.Contour(
                x=X,
                y=Y,
                z=V.T,
                colorscale=self.colorscale,
                contours=dict(start=float(levels[0]), end=float(levels[-1]), size=size),
                colorbar=dict(title="V(x, y)"),
                name="V",
            )
        )

        if trajectory is not None:
            states = np.asarray(trajectory)
            fig.add_trace(
                go.Scatter(
                    x=states[:, 0],
                    y=states[:, 1],
                    mode="lines",
                    name="Orbit",
                    line=dict(color="white", width=1),
                )
            )

        fig.update_layout(
            title=title, xaxis_title="x", yaxis_title="y", width=700, height=650
        )
        fig.update_yaxes(scaleanchor="x", scaleratio=1)

        return PlotThemes.apply_theme(fig, self.theme)

    def plot_surface(
        self,
        X: np.ndarray,
        Y: np.ndarray,
        V: np.ndarray,
        clip: Optional[float] = None,
        title: str = "Hénon-Heiles Potential Surface",
    ) -> go.Figure:
        """
        3D surface of V.

        Parameters
        ----------
        clip : float, optional
            Upper cut-off for V; the cubic term dominates at the grid
            corners and would flatten the well otherwise
        """
        X, Y, V = np.asarray(X), np.asarray(Y), np.asarray(V, dtype=float)
        _check_field(X, Y, V)

        Z = V.T
        if clip is not None:
            Z = np.minimum(Z, clip)

        fig = go.Figure(
            data=[
                go.Surface(
                    x=X,
                    y=Y,
                    z=Z,
                    colorscale=self.colorscale,
                    colorbar=dict(title="V(x, y)"),
                )
            ]
        )
        fig.update_layout(
            title=title,
            scene=dict(
                xaxis_title="x",
                yaxis_title="y",
                zaxis_title="V",
                camera=dict(eye=dict(x=1.5, y=1.5, z=1.2)),
            ),
            width=800,
            height=700,
        )

        return PlotThemes.apply_theme(fig, self.theme)


__all__ = ["PotentialPlotter"]
