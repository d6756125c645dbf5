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
Hamiltonian System - Symbolic Systems Defined by an Energy Function

Subclasses define the Hamiltonian H(q, p) instead of the vector field.
Hamilton's equations are derived symbolically:

    dq/dt =  ∂H/∂p
    dp/dt = -∂H/∂q

State ordering is x = [q_1, ..., q_n, p_1, ..., p_n].
"""

from typing import List, Optional

import numpy as np
import sympy as sp

from hhsym.systems.base.symbolic_system import ContinuousSymbolicSystem, ValidationError
from hhsym.types.core import ArrayLike


class HamiltonianSystem(ContinuousSymbolicSystem):
    """
    Symbolic system generated from a Hamiltonian.

    define_system() must set:

    Attributes
    ----------
    coordinates : List[sp.Symbol]
        Generalized coordinates q
    momenta : List[sp.Symbol]
        Conjugate momenta p (same length as coordinates)
    _H_sym : sp.Expr
        Hamiltonian H(q, p)
    parameters : Dict[sp.Symbol, float]
        Parameter values

    ``state_vars`` and ``_f_sym`` are filled in automatically.

    Examples
    --------
    >>> class HarmonicOscillator(HamiltonianSystem):
    ...     def define_system(self):
    ...         q, p = sp.symbols('q p', real=True)
    ...         self.coordinates = [q]
    ...         self.momenta = [p]
    ...         self._H_sym = (p**2 + q**2) / 2
    >>> osc = HarmonicOscillator()
    >>> osc(np.array([1.0, 0.0]))
    array([ 0., -1.])
    """

    def __init__(self, *args, **kwargs):
        self.coordinates: List[sp.Symbol] = []
        self.momenta: List[sp.Symbol] = []
        self._H_sym: Optional[sp.Expr] = None
        self._H_numpy = None
        super().__init__(*args, **kwargs)

    def _finalize_definition(self):
        if self._H_sym is None:
            raise ValidationError(
                f"Validation failed for {self.__class__.__name__}: _H_sym is not defined"
            )
        if len(self.coordinates) != len(self.momenta):
            raise ValidationError(
                f"Validation failed for {self.__class__.__name__}: "
                f"{len(self.coordinates)} coordinates but {len(self.momenta)} momenta"
            )

        self.state_vars = list(self.coordinates) + list(self.momenta)
        self._f_sym = self.hamiltons_equations(self._H_sym, self.coordinates, self.momenta)

    @staticmethod
    def hamiltons_equations(
        H: sp.Expr, coordinates: List[sp.Symbol], momenta: List[sp.Symbol]
    ) -> sp.Matrix:
        """
        Derive [∂H/∂p, -∂H/∂q] as a column vector.
        """
        dq = [sp.diff(H, p) for p in momenta]
        dp = [-sp.diff(H, q) for q in coordinates]
        return sp.Matrix(dq + dp)

    def compile(self):
        super().compile()
        H_sub = self.substitute_parameters(self._H_sym)
        self._H_numpy = sp.lambdify(self.state_vars, H_sub, modules="numpy")

    @property
    def ndof(self) -> int:
        """Number of degrees of freedom."""
        return len(self.coordinates)

    def hamiltonian(self, x: ArrayLike) -> np.ndarray:
        """
        Evaluate the total energy H(x).

        Parameters
        ----------
        x : array_like
            State (nx,), batch (batch, nx) or trajectory (T, nx)

        Returns
        -------
        float or np.ndarray
            Energy per state, shape x.shape[:-1]
        """
        x = np.asarray(x, dtype=float)
        if x.shape[-1] != self.nx:
            raise ValueError(f"Expected state with last dimension {self.nx}, got shape {x.shape}")
        columns = [x[..., i] for i in range(self.nx)]
        energies = np.broadcast_to(np.asarray(self._H_numpy(*columns), dtype=float), x.shape[:-1])
        return float(energies) if energies.ndim == 0 else energies

    def energy_error(self, trajectory: ArrayLike) -> float:
        """
        Maximum absolute energy deviation from the first state.

        Parameters
        ----------
        trajectory : array_like
            States (T, nx)
        """
        energies = self.hamiltonian(trajectory)
        return float(np.max(np.abs(energies - energies[0])))

    def print_equations(self, simplify: bool = True):
        print(f"Hamiltonian: H = {self.substitute_parameters(self._H_sym)}")
        super().print_equations(simplify=simplify)

    def get_config_dict(self):
        config = super().get_config_dict()
        config["hamiltonian"] = str(self._H_sym)
        return config
