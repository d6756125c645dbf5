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
Integrator Factory - Unified Interface for Creating Numerical Integrators

Creates the appropriate integrator from a method name or solver preset.
Simplifies integrator selection and configuration.

Examples
--------
>>> # Default (adaptive, RK45)
>>> integrator = IntegratorFactory.create(system)
>>>
>>> # Solver preset
>>> integrator = IntegratorFactory.create(system, method='implicit_stiff')
>>>
>>> # Fixed-step
>>> integrator = IntegratorFactory.create(system, method='rk4', dt=0.01)
>>>
>>> # Quick helpers
>>> integrator = IntegratorFactory.for_stiff(system)
>>> integrator = IntegratorFactory.for_simple(system, dt=0.01)
"""

from typing import Any, Callable, Dict, Optional, Union

from hhsym.systems.base.numerical_integration.fixed_step_integrators import RK4Integrator
from hhsym.systems.base.numerical_integration.integrator_base import IntegratorBase
from hhsym.systems.base.numerical_integration.method_registry import (
    DEFAULT_METHOD,
    PRESET_METHODS,
    SolverPreset,
    get_method_info,
    is_fixed_step,
    list_all_methods,
    normalize_method_name,
)
from hhsym.systems.base.numerical_integration.scipy_integrator import ScipyIntegrator
from hhsym.types.core import ScalarLike


class IntegratorFactory:
    """
    Factory for creating numerical integrators.

    Supports:
    - Scipy (adaptive): RK45, RK23, DOP853, Radau, BDF, LSODA
    - Manual (fixed-step): rk4
    - Solver presets: explicit_low_order, implicit_stiff, adaptive_default,
      high_order, auto_stiffness, fixed_rk4

    Examples
    --------
    >>> integrator = IntegratorFactory.create(system, method='explicit_low_order')
    >>> integrator.method
    'RK23'
    """

    _FIXED_STEP_CLASSES = {
        "rk4": RK4Integrator,
    }

    @classmethod
    def create(
        cls,
        system: Callable,
        method: Optional[Union[str, SolverPreset]] = None,
        dt: Optional[ScalarLike] = None,
        **options,
    ) -> IntegratorBase:
        """
        Create an integrator for a method name or preset.

        Parameters
        ----------
        system : VectorFieldFunction
            Vector field ``system(x, p, t)``
        method : str or SolverPreset, optional
            Method or preset. Default: 'RK45' (adaptive_default)
        dt : Optional[float]
            Time step (required for fixed-step methods, initial guess otherwise)
        **options
            Additional integrator options (rtol, atol, max_step, track_memory, ...)

        Returns
        -------
        IntegratorBase
            Configured integrator

        Raises
        ------
        ValueError
            If the method is unknown, or a fixed-step method has no dt

        Examples
        --------
        >>> integrator = IntegratorFactory.create(system, method='Radau', rtol=1e-8)
        >>> integrator = IntegratorFactory.create(system, method='fixed_rk4', dt=0.01)
        """
        if method is None:
            method = DEFAULT_METHOD

        resolved = normalize_method_name(method)

        if is_fixed_step(resolved):
            if dt is None:
                raise ValueError(f"Fixed-step method '{resolved}' requires dt parameter")
            integrator_class = cls._FIXED_STEP_CLASSES[resolved]
            return integrator_class(system, dt=dt, **options)

        if dt is None:
            return ScipyIntegrator(system, method=resolved, **options)
        return ScipyIntegrator(system, dt=dt, method=resolved, **options)

    @classmethod
    def for_production(cls, system: Callable, **options) -> IntegratorBase:
        """
        General-purpose adaptive integrator with tight default tolerances.

        Uses RK45 with rtol=1e-8, atol=1e-10 unless overridden.
        """
        options.setdefault("rtol", 1e-8)
        options.setdefault("atol", 1e-10)
        return cls.create(system, method=SolverPreset.ADAPTIVE_DEFAULT, **options)

    @classmethod
    def for_stiff(cls, system: Callable, **options) -> IntegratorBase:
        """Implicit integrator (Radau) for stiff problems."""
        return cls.create(system, method=SolverPreset.IMPLICIT_STIFF, **options)

    @classmethod
    def for_simple(cls, system: Callable, dt: ScalarLike = 0.01, **options) -> IntegratorBase:
        """Fixed-step RK4 integrator."""
        return cls.create(system, method=SolverPreset.FIXED_RK4, dt=dt, **options)

    @staticmethod
    def list_methods() -> Dict[str, list]:
        """List available methods and presets by category."""
        return list_all_methods()

    @staticmethod
    def get_info(method: Union[str, SolverPreset]) -> Dict[str, Any]:
        """
        Get information about a method or preset.

        Examples
        --------
        >>> IntegratorFactory.get_info('implicit_stiff')['implicit']
        True
        """
        info = get_method_info(method)
        presets = [p.value for p, m in PRESET_METHODS.items() if m == info["method"]]
        info["presets"] = presets
        return info


# ============================================================================
# Convenience Functions
# ============================================================================


def create_integrator(
    system: Callable,
    method: Optional[Union[str, SolverPreset]] = None,
    **options,
) -> IntegratorBase:
    """
    Convenience function for creating integrators.

    Alias for IntegratorFactory.create().

    Examples
    --------
    >>> integrator = create_integrator(system)
    >>> integrator = create_integrator(system, method='explicit_low_order', rtol=1e-8)
    """
    return IntegratorFactory.create(system, method, **options)


__all__ = [
    "IntegratorFactory",
    "create_integrator",
]
