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
Core Types - Fundamental Building Blocks

Defines the most basic types used throughout the package:
- Array and scalar aliases
- Semantic vector types (state, derivative, parameters)
- Function signatures for vector fields

Usage
-----
>>> from hhsym.types.core import DerivativeVector, StateVector, VectorFieldFunction
>>>
>>> def rhs(u: StateVector, p=None, t: float = 0.0) -> DerivativeVector:
...     return u
"""

from typing import Callable, Optional, Sequence, Tuple, Union

import numpy as np

# ============================================================================
# Basic Array Types
# ============================================================================

ArrayLike = Union[np.ndarray, Sequence[float]]
"""
Array-like input accepted at public entry points.

Anything ``np.asarray`` understands: NumPy arrays, lists, tuples.
Results are always returned as ``np.ndarray``.
"""

ScalarLike = Union[float, int, np.number]
"""
Scalar value (Python float/int or NumPy scalar).

Used for time, step sizes and tolerances.
"""

# ============================================================================
# Semantic Vector Types
# ============================================================================

StateVector = np.ndarray
"""
State vector u = (x, y, p_x, p_y) ∈ ℝ⁴.

Shapes:
- Single state: (4,)
- Batched states: (batch, 4)

Examples
--------
>>> u0: StateVector = np.array([0.2, 0.0, 0.4, 0.0])
"""

DerivativeVector = np.ndarray
"""
Time derivative du/dt = (dx/dt, dy/dt, dp_x/dt, dp_y/dt).

Same shape as the state it was computed from.
"""

ParameterVector = Optional[Sequence[float]]
"""
Parameter slot of the vector field signature f(u, p, t).

Present for compatibility with generic solver interfaces. The
Hénon-Heiles vector field ignores it.
"""

InitialState = Tuple[float, float, float, float]
"""Plain 4-tuple form of an initial state, as stored in configuration."""

# ============================================================================
# Function Signatures
# ============================================================================

VectorFieldFunction = Callable[[StateVector, ParameterVector, float], DerivativeVector]
"""
Vector field signature: (u, p, t) → du/dt

Integrators call systems through this signature. Autonomous systems ignore
``t``, and parameter-free systems ignore ``p``.
"""

PotentialFunction = Callable[[np.ndarray, np.ndarray], np.ndarray]
"""Potential signature: (x, y) → V(x, y), broadcasting over arrays."""


__all__ = [
    "ArrayLike",
    "ScalarLike",
    "StateVector",
    "DerivativeVector",
    "ParameterVector",
    "InitialState",
    "VectorFieldFunction",
    "PotentialFunction",
]
