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

import numpy as np
import sympy as sp

from hhsym.systems.base.hamiltonian_system import HamiltonianSystem
from hhsym.types.core import ArrayLike, DerivativeVector, ParameterVector, ScalarLike

ESCAPE_ENERGY = 1.0 / 6.0
"""Energy of the saddle points for the standard coupling (lam = 1)."""


def potential(x, y):
    """
    Hénon-Heiles potential V(x, y) = (x² + y²)/2 + x²y - y³/3.

    Broadcasts over NumPy arrays.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    return 0.5 * (x**2 + y**2) + x**2 * y - y**3 / 3.0


def hamiltonian(u: ArrayLike):
    """
    Total energy H = (p_x² + p_y²)/2 + V(x, y).

    Accepts a single state (4,) or an array of states (..., 4).
    """
    u = np.asarray(u, dtype=float)
    x, y, px, py = u[..., 0], u[..., 1], u[..., 2], u[..., 3]
    energy = 0.5 * (px**2 + py**2) + potential(x, y)
    return float(energy) if np.ndim(energy) == 0 else energy


def vector_field(
    u: ArrayLike, p: ParameterVector = None, t: ScalarLike = 0.0
) -> DerivativeVector:
    """
    Hénon-Heiles equations of motion.

    Parameters
    ----------
    u : array_like
        State (x, y, p_x, p_y), shape (4,) or (..., 4)
    p : optional
        Unused parameter slot (generic solver signature)
    t : float
        Unused (autonomous system)

    Returns
    -------
    np.ndarray
        (p_x, p_y, -x - 2xy, -y - x² + y²), same shape as u

    Examples
    --------
    >>> vector_field([0.2, 0.0, 0.4, 0.0])
    array([ 0.4 ,  0.  , -0.2 , -0.04])
    """
    u = np.asarray(u, dtype=float)
    x, y, px, py = u[..., 0], u[..., 1], u[..., 2], u[..., 3]
    return np.stack(
        [
            px,
            py,
            -x - 2.0 * x * y,
            -y - x**2 + y**2,
        ],
        axis=-1,
    )


class HenonHeiles(HamiltonianSystem):
    """
    Hénon-Heiles system - classic 2-DOF Hamiltonian testbed for chaos.

    Physical System:
    ---------------
    A star moving in the mean gravitational potential of a galaxy with an
    axis of symmetry, reduced to the meridian plane (Hénon & Heiles, 1964).
    Two coupled oscillators with a cubic coupling term.

    State Space:
    -----------
    State: x = [x, y, p_x, p_y]
        - x, y: Position in the meridian plane [dimensionless]
        - p_x, p_y: Conjugate momenta [dimensionless]

    Hamiltonian:
    -----------
        H = (p_x² + p_y²)/2 + V(x, y)
        V = (x² + y²)/2 + λ(x²y - y³/3)

    Dynamics:
    --------
    Derived from H:

        ẋ   = p_x
        ẏ   = p_y
        ṗ_x = -x - 2λxy
        ṗ_y = -y - λx² + λy²

    Parameters:
    ----------
    lam : float, default=1.0
        Strength of the cubic coupling. λ = 1 is the standard system;
        λ = 0 decouples it into two harmonic oscillators.

    Equilibria:
    ----------
    **Origin (center)**:
        x_eq = [0, 0, 0, 0], linearization has eigenvalues ±i (twice)

    **Saddles (for λ ≠ 0)**, all with zero momentum:
        S_top   = [0, 1/λ]
        S_left  = [-√3/(2λ), -1/(2λ)]
        S_right = [ √3/(2λ), -1/(2λ)]

    All three saddles sit at energy 1/(6λ²), the escape energy. Below it
    motion started inside the triangular well stays bounded. Above it
    orbits can leave through the gaps between the saddles and diverge in
    finite time.

    Behavior Regimes (λ = 1):
    ----------------
    1. **H ≲ 0.08**: Almost all orbits are regular (KAM tori)
    2. **0.08 ≲ H < 1/6**: Growing chaotic sea between islands
    3. **H > 1/6**: Escape possible

    The default initial state (0.2, 0, 0.4, 0) has H = 0.1.

    See Also:
    --------
    vector_field : Plain NumPy version of the same equations
    potential : V(x, y)
    """

    def define_system(self, lam: float = 1.0):
        x, y = sp.symbols("x y", real=True)
        px, py = sp.symbols("p_x p_y", real=True)
        lam_sym = sp.symbols("lambda", real=True)

        self.parameters = {lam_sym: lam}
        self.coordinates = [x, y]
        self.momenta = [px, py]

        V = (x**2 + y**2) / 2 + lam_sym * (x**2 * y - y**3 / 3)
        self._V_sym = V
        self._H_sym = (px**2 + py**2) / 2 + V
        self.lam = float(lam)

    def setup_equilibria(self):
        if self.lam == 0.0:
            return
        s = 1.0 / self.lam
        self.add_equilibrium("saddle_top", np.array([0.0, s, 0.0, 0.0]))
        self.add_equilibrium(
            "saddle_left", np.array([-np.sqrt(3.0) / 2.0 * s, -0.5 * s, 0.0, 0.0])
        )
        self.add_equilibrium(
            "saddle_right", np.array([np.sqrt(3.0) / 2.0 * s, -0.5 * s, 0.0, 0.0])
        )

    @property
    def escape_energy(self) -> float:
        """Saddle energy 1/(6λ²); infinite for the uncoupled system."""
        if self.lam == 0.0:
            return np.inf
        return 1.0 / (6.0 * self.lam**2)

    def potential(self, x, y):
        """
        Evaluate V(x, y) for this coupling, broadcasting over arrays.
        """
        x = np.asarray(x, dtype=float)
        y = np.asarray(y, dtype=float)
        return 0.5 * (x**2 + y**2) + self.lam * (x**2 * y - y**3 / 3.0)

    def is_bounded_energy(self, x: ArrayLike) -> bool:
        """True if H(x) is below the escape energy."""
        return bool(self.hamiltonian(x) < self.escape_energy)
