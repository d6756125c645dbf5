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
Potential Surface - Grid Evaluation of V(x, y)

Samples the potential on a rectangular grid for contour and surface plots.

Usage
-----
>>> X = make_grid()            # 31 samples in [-0.75, 0.75]
>>> V = potential_surface(X, X)
>>> V.shape
(31, 31)
"""

from typing import Optional

import numpy as np

from hhsym.systems.builtin.henon_heiles import ESCAPE_ENERGY, potential
from hhsym.types.core import ArrayLike, PotentialFunction, ScalarLike
from hhsym.types.trajectories import GridAxis, PotentialField

DEFAULT_GRID_BOUNDS = (-0.75, 0.75)
DEFAULT_GRID_STEP = 0.05


def make_grid(
    lower: ScalarLike = DEFAULT_GRID_BOUNDS[0],
    upper: ScalarLike = DEFAULT_GRID_BOUNDS[1],
    step: ScalarLike = DEFAULT_GRID_STEP,
) -> GridAxis:
    """
    Linearly spaced axis from lower to upper inclusive.

    The sample count is round((upper - lower) / step) + 1, so the end
    point is hit exactly instead of being lost to floating point drift
    as with ``np.arange``.

    Raises
    ------
    ValueError
        If step is not positive or upper < lower

    Examples
    --------
    >>> make_grid(-0.75, 0.75, 0.05).size
    31
    """
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    if upper < lower:
        raise ValueError(f"upper ({upper}) must not be below lower ({lower})")

    n = int(round((upper - lower) / step)) + 1
    return np.linspace(lower, upper, n)


def potential_surface(
    X: ArrayLike, Y: ArrayLike, V: Optional[PotentialFunction] = None
) -> PotentialField:
    """
    Evaluate the potential at every grid point.

    Parameters
    ----------
    X, Y : array_like
        Ordered x- and y-samples
    V : callable, optional
        Potential V(x, y); defaults to the standard Hénon-Heiles potential

    Returns
    -------
    np.ndarray
        Shape (len(X), len(Y)) with cell (i, j) = V(X[i], Y[j])
    """
    if V is None:
        V = potential
    XX, YY = np.meshgrid(np.asarray(X, dtype=float), np.asarray(Y, dtype=float), indexing="ij")
    return np.asarray(V(XX, YY), dtype=float)


def energy_contour_levels(
    n_levels: int = 10, max_energy: ScalarLike = ESCAPE_ENERGY, include_escape: bool = True
) -> np.ndarray:
    """
    Potential levels for contour plots.

    Evenly spaced in (0, max_energy], plus the escape energy (the level
    whose contour runs through the saddles) when requested.
    """
    levels = np.linspace(0.0, max_energy, n_levels + 1)[1:]
    if include_escape:
        levels = np.union1d(levels, [ESCAPE_ENERGY])
    return levels
