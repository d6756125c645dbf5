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
Numerical Integration
=====================

Integrators for ordinary differential equations dx/dt = f(x, p, t).

>>> from hhsym.systems.base.numerical_integration import (
...     IntegratorFactory,
...     SolverPreset,
...     create_integrator,
... )
>>>
>>> integrator = IntegratorFactory.create(system, method=SolverPreset.EXPLICIT_LOW_ORDER)
>>> integrator = create_integrator(system, method='rk4', dt=0.01)

Supported Methods
-----------------
- SciPy (adaptive): RK45, RK23, DOP853, Radau, BDF, LSODA
- Manual (fixed-step): rk4
"""

from .fixed_step_integrators import RK4Integrator
from .integrator_base import IntegrationError, IntegratorBase, StepMode
from .integrator_factory import IntegratorFactory, create_integrator
from .method_registry import (
    RECOGNIZED_PRESETS,
    SolverPreset,
    is_fixed_step,
    is_implicit,
    normalize_method_name,
)
from .scipy_integrator import ScipyIntegrator

__all__ = [
    # Base classes and enums
    "IntegratorBase",
    "IntegrationError",
    "StepMode",
    # Integrators
    "RK4Integrator",
    "ScipyIntegrator",
    # Factory
    "IntegratorFactory",
    "create_integrator",
    # Registry
    "SolverPreset",
    "RECOGNIZED_PRESETS",
    "normalize_method_name",
    "is_fixed_step",
    "is_implicit",
]
