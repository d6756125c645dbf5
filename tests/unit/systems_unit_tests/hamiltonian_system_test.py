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
Unit tests for the symbolic system base classes

Tests cover:
1. Hamilton's equations derived from H
2. Validation of malformed definitions (ValidationError)
3. Batched evaluation and equilibrium registration on a generic system
"""

import numpy as np
import pytest
import sympy as sp

from hhsym.systems.base.hamiltonian_system import HamiltonianSystem
from hhsym.systems.base.symbolic_system import ContinuousSymbolicSystem, ValidationError


# ============================================================================
# Test Systems
# ============================================================================


class HarmonicOscillator(HamiltonianSystem):
    """H = (p² + k q²)/2"""

    def define_system(self, k=1.0):
        q, p = sp.symbols("q p", real=True)
        k_sym = sp.symbols("k", positive=True)
        self.coordinates = [q]
        self.momenta = [p]
        self.parameters = {k_sym: k}
        self._H_sym = (p**2 + k_sym * q**2) / 2


class DampedOscillator(ContinuousSymbolicSystem):
    """Non-Hamiltonian system defined directly by its vector field"""

    def define_system(self, c=0.5):
        x, v = sp.symbols("x v", real=True)
        c_sym = sp.symbols("c", positive=True)
        self.state_vars = [x, v]
        self.parameters = {c_sym: c}
        self._f_sym = sp.Matrix([v, -x - c_sym * v])


class MissingHamiltonian(HamiltonianSystem):
    def define_system(self):
        q, p = sp.symbols("q p", real=True)
        self.coordinates = [q]
        self.momenta = [p]


class MismatchedMomenta(HamiltonianSystem):
    def define_system(self):
        q1, q2, p = sp.symbols("q1 q2 p", real=True)
        self.coordinates = [q1, q2]
        self.momenta = [p]
        self._H_sym = p**2 / 2 + q1**2 + q2**2


class UnknownSymbol(ContinuousSymbolicSystem):
    def define_system(self):
        x = sp.symbols("x", real=True)
        a = sp.symbols("a")
        self.state_vars = [x]
        self._f_sym = sp.Matrix([a * x])


class WrongShape(ContinuousSymbolicSystem):
    def define_system(self):
        x, y = sp.symbols("x y", real=True)
        self.state_vars = [x, y]
        self._f_sym = sp.Matrix([y])


# ============================================================================
# Test Class 1: Hamiltonian Systems
# ============================================================================


class TestHamiltonianSystem:
    """Test derivation of Hamilton's equations"""

    def test_equations_of_motion(self):
        osc = HarmonicOscillator(k=4.0)
        np.testing.assert_allclose(osc([1.0, 0.5]), [0.5, -4.0])

    def test_state_ordering(self):
        osc = HarmonicOscillator()
        assert [str(v) for v in osc.state_vars] == ["q", "p"]
        assert osc.ndof == 1

    def test_hamiltons_equations_static(self):
        q, p = sp.symbols("q p")
        f = HamiltonianSystem.hamiltons_equations(p**2 / 2 + q**4, [q], [p])
        assert f.shape == (2, 1)
        assert sp.simplify(f[0] - p) == 0
        assert sp.simplify(f[1] + 4 * q**3) == 0

    def test_hamiltonian_value(self):
        osc = HarmonicOscillator(k=2.0)
        assert osc.hamiltonian([1.0, 1.0]) == pytest.approx(1.5)

    def test_jacobian(self):
        osc = HarmonicOscillator(k=3.0)
        np.testing.assert_allclose(osc.jacobian([0.2, 0.1]), [[0.0, 1.0], [-3.0, 0.0]])


# ============================================================================
# Test Class 2: Validation
# ============================================================================


class TestValidation:
    """Malformed definitions raise ValidationError"""

    def test_missing_hamiltonian(self):
        with pytest.raises(ValidationError, match="_H_sym"):
            MissingHamiltonian()

    def test_mismatched_momenta(self):
        with pytest.raises(ValidationError, match="2 coordinates but 1 momenta"):
            MismatchedMomenta()

    def test_unknown_symbol(self):
        with pytest.raises(ValidationError, match="neither states nor parameters"):
            UnknownSymbol()

    def test_wrong_shape(self):
        with pytest.raises(ValidationError, match="column vector"):
            WrongShape()

    def test_validation_error_is_value_error(self):
        assert issubclass(ValidationError, ValueError)


# ============================================================================
# Test Class 3: Generic Symbolic System
# ============================================================================


class TestContinuousSymbolicSystem:
    """Test evaluation helpers on a directly defined system"""

    def test_batched_call(self):
        system = DampedOscillator(c=0.5)
        batch = np.array([[1.0, 0.0], [0.0, 1.0], [2.0, -1.0]])
        np.testing.assert_allclose(system(batch), [[0.0, -1.0], [1.0, -0.5], [-1.0, -1.5]])

    def test_origin_registered(self):
        system = DampedOscillator()
        np.testing.assert_array_equal(system.get_equilibrium(), np.zeros(2))

    def test_add_equilibrium_shape_check(self):
        system = DampedOscillator()
        with pytest.raises(ValueError, match="shape"):
            system.add_equilibrium("bad", np.zeros(3))

    def test_add_unverified_equilibrium(self):
        system = DampedOscillator()
        system.add_equilibrium("guess", np.array([1.0, 0.0]), verify=False)
        assert "guess" in system.list_equilibria()

    def test_linearization_is_stable(self):
        eigenvalues = np.linalg.eigvals(DampedOscillator(c=0.5).linearize())
        assert np.all(eigenvalues.real < 0)

    def test_recompile_after_parameter_change(self):
        system = DampedOscillator(c=0.5)
        c_sym = next(iter(system.parameters))
        system.parameters[c_sym] = 2.0
        system.compile()
        np.testing.assert_allclose(system([0.0, 1.0]), [1.0, -2.0])
