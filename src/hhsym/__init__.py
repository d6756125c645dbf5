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
hhsym - Symbolic Hénon-Heiles Simulation
========================================

The Hénon-Heiles system, its potential surface, and the solver layer used
to integrate it.

>>> import hhsym
>>> hhsym.vector_field([0.2, 0.0, 0.4, 0.0])
array([ 0.4 ,  0.  , -0.2 , -0.04])
>>> result = hhsym.simulate()
>>> hhsym.energy_error(result) < 1e-5
True
>>> X, Y, V = hhsym.compute_potential_field()
>>> V.shape
(31, 31)

Plotting lives in ``hhsym.visualization``.
"""

__version__ = "0.1.0"

from hhsym.analysis import energy_contour_levels, make_grid, potential_surface
from hhsym.simulation import (
    DEFAULT_INITIAL_STATE,
    DEFAULT_TIME_SPAN,
    GridConfig,
    SimulationConfig,
    compare_solvers,
    compute_potential_field,
    energy_error,
    integrate_trajectory,
    max_state_deviation,
    simulate,
)
from hhsym.systems import HenonHeiles, ValidationError
from hhsym.systems.base.numerical_integration import (
    IntegrationError,
    IntegratorFactory,
    SolverPreset,
    create_integrator,
)
from hhsym.systems.builtin.henon_heiles import (
    ESCAPE_ENERGY,
    hamiltonian,
    potential,
    vector_field,
)

__all__ = [
    # System
    "HenonHeiles",
    "vector_field",
    "potential",
    "hamiltonian",
    "ESCAPE_ENERGY",
    # Potential surface
    "make_grid",
    "potential_surface",
    "energy_contour_levels",
    # Driver
    "SimulationConfig",
    "GridConfig",
    "DEFAULT_INITIAL_STATE",
    "DEFAULT_TIME_SPAN",
    "simulate",
    "integrate_trajectory",
    "compute_potential_field",
    "compare_solvers",
    "energy_error",
    "max_state_deviation",
    # Solvers
    "SolverPreset",
    "IntegratorFactory",
    "create_integrator",
    # Errors
    "IntegrationError",
    "ValidationError",
]
