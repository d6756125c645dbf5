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
Integration Method Registry and Normalization
==============================================

Single source of truth for the integration methods the package can run,
with support for:
- Solver presets (e.g., 'explicit_low_order' → 'RK23')
- Case-insensitive name normalization (e.g., 'rk45' → 'RK45')
- Method classification (fixed-step vs adaptive, explicit vs implicit)
- Validation with helpful error messages

Solver Presets
--------------
A preset names a *strategy* rather than a specific algorithm. The three
recognized strategies are:

- ``explicit_low_order``: Bogacki-Shampine 3(2) (``RK23``)
- ``implicit_stiff``: Radau IIA implicit Runge-Kutta (``Radau``)
- ``adaptive_default``: Dormand-Prince 5(4) (``RK45``)

Extra presets: ``high_order`` (``DOP853``), ``auto_stiffness``
(``LSODA``) and ``fixed_rk4`` (``rk4``).

Presets only change how the solver samples the vector field, never what
the vector field computes.

Usage Examples
--------------
>>> normalize_method_name('explicit_low_order')
'RK23'
>>> normalize_method_name('rk45')
'RK45'
>>> is_fixed_step('rk4')
True
>>> is_implicit('Radau')
True
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Union

# ============================================================================
# Deterministic Methods - Fixed Step
# ============================================================================

FIXED_STEP_METHODS: FrozenSet[str] = frozenset(
    [
        "rk4",  # Classic Runge-Kutta 4 (4th order)
    ]
)

# ============================================================================
# Deterministic Methods - Adaptive (scipy.integrate.solve_ivp)
# ============================================================================

EXPLICIT_ADAPTIVE_METHODS: FrozenSet[str] = frozenset(
    [
        "RK45",  # Dormand-Prince 5(4) - general purpose
        "RK23",  # Bogacki-Shampine 3(2) - lower accuracy
        "DOP853",  # Dormand-Prince 8(5,3) - high accuracy
    ]
)

IMPLICIT_ADAPTIVE_METHODS: FrozenSet[str] = frozenset(
    [
        "Radau",  # Implicit Runge-Kutta (stiff systems)
        "BDF",  # Backward Differentiation Formula (very stiff)
    ]
)

AUTO_SWITCHING_METHODS: FrozenSet[str] = frozenset(
    [
        "LSODA",  # Switches between Adams and BDF
    ]
)

ADAPTIVE_METHODS: FrozenSet[str] = (
    EXPLICIT_ADAPTIVE_METHODS | IMPLICIT_ADAPTIVE_METHODS | AUTO_SWITCHING_METHODS
)

ALL_METHODS: FrozenSet[str] = FIXED_STEP_METHODS | ADAPTIVE_METHODS


class SolverPreset(Enum):
    """
    Solver-selection configuration.

    Attributes
    ----------
    EXPLICIT_LOW_ORDER : str
        Low-order explicit adaptive method. Cheapest per step, best suited
        for smooth non-stiff problems at moderate tolerances.
    IMPLICIT_STIFF : str
        Implicit method for stiff problems. Pays for Jacobians and LU
        decompositions on every step.
    ADAPTIVE_DEFAULT : str
        General-purpose adaptive explicit method.
    HIGH_ORDER : str
        High-order explicit method for tight tolerances.
    AUTO_STIFFNESS : str
        Automatic stiffness detection and switching.
    FIXED_RK4 : str
        Classic fixed-step RK4 (requires dt).
    """

    EXPLICIT_LOW_ORDER = "explicit_low_order"
    IMPLICIT_STIFF = "implicit_stiff"
    ADAPTIVE_DEFAULT = "adaptive_default"
    HIGH_ORDER = "high_order"
    AUTO_STIFFNESS = "auto_stiffness"
    FIXED_RK4 = "fixed_rk4"


PRESET_METHODS: Dict[SolverPreset, str] = {
    SolverPreset.EXPLICIT_LOW_ORDER: "RK23",
    SolverPreset.IMPLICIT_STIFF: "Radau",
    SolverPreset.ADAPTIVE_DEFAULT: "RK45",
    SolverPreset.HIGH_ORDER: "DOP853",
    SolverPreset.AUTO_STIFFNESS: "LSODA",
    SolverPreset.FIXED_RK4: "rk4",
}

RECOGNIZED_PRESETS: List[SolverPreset] = [
    SolverPreset.EXPLICIT_LOW_ORDER,
    SolverPreset.IMPLICIT_STIFF,
    SolverPreset.ADAPTIVE_DEFAULT,
]
"""The three strategies every run configuration must understand."""

DEFAULT_METHOD = PRESET_METHODS[SolverPreset.ADAPTIVE_DEFAULT]

# Lowercase lookup: 'rk45' → 'RK45', 'radau' → 'Radau', ...
_CASE_INSENSITIVE: Dict[str, str] = {m.lower(): m for m in ALL_METHODS}


# ============================================================================
# Normalization
# ============================================================================


def normalize_method_name(method: Union[str, SolverPreset]) -> str:
    """
    Resolve a preset or method name to a concrete method name.

    Parameters
    ----------
    method : str or SolverPreset
        Preset (enum or its string value), or a method name in any case

    Returns
    -------
    str
        Canonical method name (e.g. 'RK45', 'Radau', 'rk4')

    Raises
    ------
    ValueError
        If the name is neither a preset nor a known method

    Examples
    --------
    >>> normalize_method_name(SolverPreset.IMPLICIT_STIFF)
    'Radau'
    >>> normalize_method_name('adaptive_default')
    'RK45'
    >>> normalize_method_name('dop853')
    'DOP853'

    Notes
    -----
    Normalization is idempotent: normalize(normalize(x)) = normalize(x)
    """
    if method is None:
        raise ValueError("method cannot be None")

    if isinstance(method, SolverPreset):
        return PRESET_METHODS[method]

    if method in ALL_METHODS:
        return method

    key = str(method).strip().lower()

    for preset in SolverPreset:
        if preset.value == key:
            return PRESET_METHODS[preset]

    if key in _CASE_INSENSITIVE:
        return _CASE_INSENSITIVE[key]

    raise ValueError(
        f"Invalid method '{method}'. Choose a preset from "
        f"{[p.value for p in SolverPreset]} or a method from {sorted(ALL_METHODS)}"
    )


def validate_method(method: Union[str, SolverPreset]):
    """
    Check whether a method or preset can be run.

    Returns
    -------
    Tuple[bool, Optional[str]]
        (is_valid, error_message)

    Examples
    --------
    >>> validate_method('implicit_stiff')
    (True, None)
    >>> validate_method('tsit5')[0]
    False
    """
    try:
        normalize_method_name(method)
    except ValueError as e:
        return False, str(e)
    return True, None


# ============================================================================
# Classification
# ============================================================================


def is_fixed_step(method: Union[str, SolverPreset]) -> bool:
    """
    Check if integration method uses fixed time stepping.

    Examples
    --------
    >>> is_fixed_step('rk4')
    True
    >>> is_fixed_step('RK45')
    False
    """
    return normalize_method_name(method) in FIXED_STEP_METHODS


def is_implicit(method: Union[str, SolverPreset]) -> bool:
    """
    Check if method is implicit (uses Jacobians and linear solves).

    LSODA counts as implicit since it switches to BDF on stiff stretches.
    """
    name = normalize_method_name(method)
    return name in IMPLICIT_ADAPTIVE_METHODS or name in AUTO_SWITCHING_METHODS


def get_method_info(method: Union[str, SolverPreset]) -> Dict[str, object]:
    """
    Describe a method.

    Returns
    -------
    dict
        Keys: 'method', 'fixed_step', 'implicit', 'library'
    """
    name = normalize_method_name(method)
    return {
        "method": name,
        "fixed_step": name in FIXED_STEP_METHODS,
        "implicit": is_implicit(name),
        "library": "hhsym" if name in FIXED_STEP_METHODS else "scipy",
    }


def list_all_methods() -> Dict[str, List[str]]:
    """
    List methods by category.

    Examples
    --------
    >>> list_all_methods()['presets']
    ['explicit_low_order', 'implicit_stiff', 'adaptive_default', 'high_order', 'auto_stiffness', 'fixed_rk4']
    """
    return {
        "presets": [p.value for p in SolverPreset],
        "fixed_step": sorted(FIXED_STEP_METHODS),
        "explicit_adaptive": sorted(EXPLICIT_ADAPTIVE_METHODS),
        "implicit_adaptive": sorted(IMPLICIT_ADAPTIVE_METHODS),
        "auto_switching": sorted(AUTO_SWITCHING_METHODS),
    }


__all__ = [
    "SolverPreset",
    "PRESET_METHODS",
    "RECOGNIZED_PRESETS",
    "DEFAULT_METHOD",
    "FIXED_STEP_METHODS",
    "ADAPTIVE_METHODS",
    "ALL_METHODS",
    "normalize_method_name",
    "validate_method",
    "is_fixed_step",
    "is_implicit",
    "get_method_info",
    "list_all_methods",
]
