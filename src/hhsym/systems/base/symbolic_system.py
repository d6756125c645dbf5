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
Continuous Symbolic System - Symbolic Autonomous Continuous-Time Systems
========================================================================

Base class for autonomous systems dx/dt = f(x) written with SymPy and
compiled to NumPy.

Key Features
------------
- Symbolic definition via define_system() (template method pattern)
- Validation of the definition on construction
- Code generation with sympy.lambdify (dynamics and Jacobian)
- Generic vector-field call signature ``system(x, p, t)``
- Linearization A = ∂f/∂x
- Named equilibrium storage and verification
- Configuration export to dict / JSON

Usage Example
-------------
```python
class Oscillator(ContinuousSymbolicSystem):
    def define_system(self, k=1.0):
        x, v = sp.symbols('x v', real=True)
        k_sym = sp.symbols('k', positive=True)

        self.state_vars = [x, v]
        self._f_sym = sp.Matrix([v, -k_sym * x])
        self.parameters = {k_sym: k}

system = Oscillator(k=2.0)
dx = system(np.array([1.0, 0.0]))
A = system.linearize(np.zeros(2))
```
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import numpy as np
import sympy as sp

from hhsym.types.core import (
    ArrayLike,
    DerivativeVector,
    ParameterVector,
    ScalarLike,
)


class ValidationError(ValueError):
    """Raised when a symbolic system definition is malformed."""

    pass


class ContinuousSymbolicSystem(ABC):
    """
    Abstract base class for symbolic autonomous continuous-time systems.

    Subclasses implement define_system() to populate:

    Attributes
    ----------
    state_vars : List[sp.Symbol]
        State variables as SymPy symbols
    parameters : Dict[sp.Symbol, float]
        System parameters with Symbol keys
    _f_sym : sp.Matrix
        Symbolic dynamics dx/dt = f(x), column vector of length nx

    Examples
    --------
    >>> system = MySystem(param=2.0)   # define → validate → compile
    >>> system.nx
    4
    >>> system(np.zeros(4))
    array([0., 0., 0., 0.])
    """

    def __init__(self, *args, **kwargs):
        """
        Initialize the symbolic system using template method pattern.

        Sequence:
        1. Initialize empty symbolic containers
        2. Call user-defined define_system()
        3. Validate the definition
        4. Generate numerical functions
        5. Register equilibria (origin always, then setup_equilibria())

        Subclasses should NOT override __init__. Instead, implement
        define_system().

        Raises
        ------
        ValidationError
            If the system definition is invalid
        """
        self.state_vars: List[sp.Symbol] = []
        """State variables as SymPy Symbol objects (e.g., [x, y, px, py])"""

        self.parameters: Dict[sp.Symbol, float] = {}
        """System parameters: Symbol → numeric value"""

        self._f_sym: Optional[sp.Matrix] = None
        """Symbolic dynamics dx/dt = f(x)"""

        self._f_numpy = None
        self._jac_numpy = None
        self._equilibria: Dict[str, np.ndarray] = {}

        self.define_system(*args, **kwargs)
        self._finalize_definition()
        self._validate()
        self.compile()

        self.add_equilibrium("origin", np.zeros(self.nx), verify=False)
        self.setup_equilibria()

    # ========================================================================
    # Template Methods
    # ========================================================================

    @abstractmethod
    def define_system(self, *args, **kwargs):
        """
        Define the symbolic system.

        Must set ``state_vars``, ``_f_sym`` and ``parameters``.
        """
        pass

    def setup_equilibria(self):
        """
        Register system-specific equilibria after initialization.

        The origin is always added, so the default does nothing.
        """
        pass

    def _finalize_definition(self):
        """Hook run between define_system() and validation."""
        pass

    def _validate(self):
        """Check the definition and raise ValidationError listing every problem."""
        errors = []

        if not self.state_vars:
            errors.append("state_vars is empty - at least one state variable required")
        for i, var in enumerate(self.state_vars):
            if not isinstance(var, sp.Symbol):
                errors.append(
                    f"state_vars[{i}] = {var} is not a SymPy Symbol "
                    f"(got {type(var).__name__})"
                )

        if self._f_sym is None:
            errors.append("_f_sym is not defined (is None)")
        elif not isinstance(self._f_sym, sp.Matrix):
            errors.append(f"_f_sym must be a sympy Matrix, got {type(self._f_sym).__name__}")
        else:
            if self._f_sym.shape != (len(self.state_vars), 1):
                errors.append(
                    f"_f_sym must be a column vector with {len(self.state_vars)} rows, "
                    f"got shape {self._f_sym.shape}"
                )

            allowed = set(self.state_vars) | set(self.parameters.keys())
            unknown = self._f_sym.free_symbols - allowed
            if unknown:
                errors.append(
                    f"_f_sym uses symbols that are neither states nor parameters: "
                    f"{sorted(str(s) for s in unknown)}"
                )

        for key in self.parameters:
            if not isinstance(key, sp.Symbol):
                errors.append(f"parameter key {key} is not a SymPy Symbol")

        if errors:
            raise ValidationError(
                f"Validation failed for {self.__class__.__name__}:\n"
                + "\n".join(f"  - {e}" for e in errors)
            )

    # ========================================================================
    # Code Generation
    # ========================================================================

    def substitute_parameters(self, expr):
        """Substitute numerical parameter values into a symbolic expression."""
        return expr.subs(self.parameters)

    def compile(self):
        """
        Generate NumPy functions for the dynamics and its Jacobian.

        Called automatically on construction. Call again after changing
        ``parameters`` by hand.
        """
        f_sub = self.substitute_parameters(self._f_sym)
        self._f_numpy = sp.lambdify(self.state_vars, list(f_sub), modules="numpy")

        jac_sub = f_sub.jacobian(self.state_vars)
        self._jac_numpy = sp.lambdify(self.state_vars, jac_sub, modules="numpy")

    # ========================================================================
    # Dimensions
    # ========================================================================

    @property
    def nx(self) -> int:
        """Number of state variables."""
        return len(self.state_vars)

    # ========================================================================
    # Evaluation
    # ========================================================================

    def __call__(
        self, x: ArrayLike, p: ParameterVector = None, t: ScalarLike = 0.0
    ) -> DerivativeVector:
        """
        Evaluate dx/dt = f(x).

        Parameters
        ----------
        x : array_like
            State (nx,) or batch of states (batch, nx)
        p : optional
            Parameter slot of the generic vector-field signature. Unused:
            parameters are fixed at construction.
        t : float
            Time. Unused (autonomous system).

        Returns
        -------
        np.ndarray
            State derivative, same shape as x

        Raises
        ------
        ValueError
            If the last dimension of x is not nx
        """
        x = np.asarray(x, dtype=float)
        if x.shape[-1] != self.nx:
            raise ValueError(f"Expected state with last dimension {self.nx}, got shape {x.shape}")

        columns = [x[..., i] for i in range(self.nx)]
        values = self._f_numpy(*columns)
        values = np.broadcast_arrays(*[np.asarray(v, dtype=float) for v in values])
        return np.stack(values, axis=-1)

    def jacobian(self, x: ArrayLike) -> np.ndarray:
        """
        Evaluate the Jacobian ∂f/∂x at a single state.

        Returns
        -------
        np.ndarray
            (nx, nx) matrix
        """
        x = np.asarray(x, dtype=float).reshape(-1)
        if x.shape[0] != self.nx:
            raise ValueError(f"Expected state of length {self.nx}, got shape {x.shape}")
        return np.array(self._jac_numpy(*x), dtype=float).reshape(self.nx, self.nx)

    def linearize(self, x_eq: Optional[ArrayLike] = None) -> np.ndarray:
        """
        Linearize the dynamics around a state: A = ∂f/∂x at x_eq.

        Parameters
        ----------
        x_eq : array_like or str, optional
            State or name of a registered equilibrium. Default: origin

        Examples
        --------
        >>> A = system.linearize('origin')
        >>> np.linalg.eigvals(A)
        """
        if x_eq is None:
            x_eq = "origin"
        if isinstance(x_eq, str):
            x_eq = self.get_equilibrium(x_eq)
        return self.jacobian(x_eq)

    # ========================================================================
    # Equilibria
    # ========================================================================

    def verify_equilibrium(self, x_eq: ArrayLike, tol: ScalarLike = 1e-8) -> bool:
        """Check ||f(x_eq)|| < tol."""
        dx = self(np.asarray(x_eq, dtype=float))
        return bool(np.linalg.norm(dx) < tol)

    def add_equilibrium(
        self, name: str, x_eq: ArrayLike, verify: bool = True, tol: ScalarLike = 1e-8
    ):
        """
        Register a named equilibrium.

        Raises
        ------
        ValueError
            If verify=True and x_eq is not an equilibrium, or has wrong length
        """
        x_eq = np.asarray(x_eq, dtype=float)
        if x_eq.shape != (self.nx,):
            raise ValueError(f"Equilibrium must have shape ({self.nx},), got {x_eq.shape}")
        if verify and not self.verify_equilibrium(x_eq, tol):
            raise ValueError(
                f"State {x_eq} is not an equilibrium: ||f(x)|| = {np.linalg.norm(self(x_eq)):.3e}"
            )
        self._equilibria[name] = x_eq

    def get_equilibrium(self, name: str = "origin") -> np.ndarray:
        """Get a registered equilibrium by name."""
        if name not in self._equilibria:
            raise KeyError(f"Unknown equilibrium '{name}'. Available: {self.list_equilibria()}")
        return self._equilibria[name].copy()

    def list_equilibria(self) -> List[str]:
        """Names of registered equilibria."""
        return list(self._equilibria.keys())

    # ========================================================================
    # Display and Configuration
    # ========================================================================

    def print_equations(self, simplify: bool = True):
        """
        Print symbolic equations using continuous-time notation.

        Examples
        --------
        >>> system.print_equations()
        ======================================================================
        HenonHeiles (Continuous-Time)
        ======================================================================
        State Variables: [x, y, p_x, p_y]
        Dimensions: nx=4

        Dynamics: dx/dt = f(x)
          dx/dt = p_x
          ...
        ======================================================================
        """
        print("=" * 70)
        print(f"{self.__class__.__name__} (Continuous-Time)")
        print("=" * 70)
        print(f"State Variables: {self.state_vars}")
        print(f"Dimensions: nx={self.nx}")

        print("\nDynamics: dx/dt = f(x)")
        for var, expr in zip(self.state_vars, self._f_sym):
            expr_sub = self.substitute_parameters(expr)
            if simplify:
                expr_sub = sp.simplify(expr_sub)
            print(f"  d{var}/dt = {expr_sub}")

        print("=" * 70)

    def get_config_dict(self) -> Dict[str, Any]:
        """
        Get system configuration as dictionary.

        Returns
        -------
        Dict
            'class_name', 'state_vars', 'parameters', 'nx', 'equilibria'
        """
        params_dict = {str(k): float(v) for k, v in self.parameters.items()}

        return {
            "class_name": self.__class__.__name__,
            "state_vars": [str(v) for v in self.state_vars],
            "parameters": params_dict,
            "nx": self.nx,
            "equilibria": {k: v.tolist() for k, v in self._equilibria.items()},
        }

    def save_config(self, filename: str):
        """Save system configuration to JSON file."""
        with open(filename, "w") as f:
            json.dump(self.get_config_dict(), f, indent=2)

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v}" for k, v in self.parameters.items())
        return f"{self.__class__.__name__}(nx={self.nx}, {params})"
