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
Unit tests for the Hénon-Heiles system

Tests cover:
1. Plain NumPy vector field (values, batching, ignored p and t)
2. Potential and Hamiltonian
3. Symbolic system agrees with the plain vector field
4. Equilibria, saddle energies and escape energy
5. Linearization
6. Generalized coupling strength
7. Configuration export
"""

import json

import numpy as np
import pytest

from hhsym.systems.builtin.henon_heiles import (
    ESCAPE_ENERGY,
    HenonHeiles,
    hamiltonian,
    potential,
    vector_field,
)

U0 = np.array([0.2, 0.0, 0.4, 0.0])


@pytest.fixture(scope="module")
def system():
    return HenonHeiles()


# ============================================================================
# Test Class 1: Vector Field
# ============================================================================


class TestVectorField:
    """Test the plain NumPy equations of motion"""

    def test_origin_is_fixed_point(self):
        """Derivative vanishes at the origin"""
        np.testing.assert_array_equal(vector_field(np.zeros(4)), np.zeros(4))

    def test_default_initial_state(self):
        """Known derivative at u0 = (0.2, 0, 0.4, 0)"""
        np.testing.assert_allclose(vector_field(U0), [0.4, 0.0, -0.2, -0.04], rtol=0, atol=1e-15)

    def test_accepts_lists(self):
        """Sequences are converted to arrays"""
        result = vector_field([0.2, 0.0, 0.4, 0.0])
        assert isinstance(result, np.ndarray)
        assert result.shape == (4,)

    def test_parameter_and_time_ignored(self):
        """System is autonomous; p and t do not change the result"""
        u = np.array([0.1, -0.3, 0.25, 0.05])
        reference = vector_field(u)
        np.testing.assert_array_equal(vector_field(u, p=[1.0, 2.0], t=123.4), reference)

    def test_batched_states(self):
        """(B, 4) input gives row-wise derivatives"""
        batch = np.array([[0.0, 0.0, 0.0, 0.0], [0.2, 0.0, 0.4, 0.0], [0.1, 0.2, -0.1, 0.3]])
        result = vector_field(batch)

        assert result.shape == (3, 4)
        for i in range(3):
            np.testing.assert_array_equal(result[i], vector_field(batch[i]))

    def test_does_not_modify_input(self):
        """Input state is left untouched"""
        u = U0.copy()
        vector_field(u)
        np.testing.assert_array_equal(u, U0)

    def test_position_derivative_is_momentum(self):
        """dx/dt = p_x and dy/dt = p_y"""
        u = np.array([0.3, -0.1, 0.7, -0.2])
        du = vector_field(u)
        assert du[0] == u[2]
        assert du[1] == u[3]


# ============================================================================
# Test Class 2: Potential and Hamiltonian
# ============================================================================


class TestPotentialAndEnergy:
    """Test V(x, y) and H(u)"""

    def test_potential_at_origin(self):
        assert potential(0.0, 0.0) == 0.0

    @pytest.mark.parametrize("x", [-0.7, -0.2, 0.0, 0.35, 1.5])
    def test_potential_on_x_axis(self, x):
        """V(x, 0) = x²/2"""
        assert potential(x, 0.0) == pytest.approx(0.5 * x**2)

    def test_potential_broadcasts(self):
        """Arrays broadcast like NumPy ufuncs"""
        X, Y = np.meshgrid(np.linspace(-0.5, 0.5, 4), np.linspace(-0.5, 0.5, 3))
        V = potential(X, Y)
        assert V.shape == (3, 4)
        assert V[1, 2] == pytest.approx(potential(X[1, 2], Y[1, 2]))

    def test_potential_is_symmetric_in_x(self):
        """V(-x, y) = V(x, y)"""
        assert potential(-0.3, 0.2) == pytest.approx(potential(0.3, 0.2))

    def test_default_energy(self):
        """H(u0) = 0.1"""
        assert hamiltonian(U0) == pytest.approx(0.1)

    def test_hamiltonian_returns_float_for_single_state(self):
        assert isinstance(hamiltonian(U0), float)

    def test_hamiltonian_trajectory(self):
        """(T, 4) input gives (T,) energies"""
        states = np.vstack([U0, np.zeros(4), U0])
        energies = hamiltonian(states)
        np.testing.assert_allclose(energies, [0.1, 0.0, 0.1])

    def test_gradient_consistency(self):
        """dp/dt equals -∇V (finite differences)"""
        x, y, h = 0.13, -0.21, 1e-6
        dVdx = (potential(x + h, y) - potential(x - h, y)) / (2 * h)
        dVdy = (potential(x, y + h) - potential(x, y - h)) / (2 * h)
        du = vector_field([x, y, 0.0, 0.0])
        np.testing.assert_allclose(du[2:], [-dVdx, -dVdy], atol=1e-8)


# ============================================================================
# Test Class 3: Symbolic System
# ============================================================================


class TestSymbolicSystem:
    """Test the HamiltonianSystem-based HenonHeiles class"""

    def test_dimensions(self, system):
        assert system.nx == 4
        assert system.ndof == 2
        assert [str(v) for v in system.state_vars] == ["x", "y", "p_x", "p_y"]

    def test_matches_plain_vector_field(self, system):
        """Derived equations equal the hand-written ones"""
        rng = np.random.default_rng(0)
        states = rng.uniform(-0.6, 0.6, size=(50, 4))
        np.testing.assert_allclose(system(states), vector_field(states), rtol=1e-14, atol=1e-15)

    def test_single_state_call(self, system):
        np.testing.assert_allclose(system(U0), [0.4, 0.0, -0.2, -0.04], atol=1e-15)

    def test_generic_signature(self, system):
        """Callable as system(x, p, t)"""
        np.testing.assert_allclose(system(U0, None, 5.0), system(U0))

    def test_wrong_dimension_raises(self, system):
        with pytest.raises(ValueError, match="last dimension 4"):
            system(np.zeros(3))

    def test_hamiltonian_matches_plain(self, system):
        rng = np.random.default_rng(1)
        states = rng.uniform(-0.5, 0.5, size=(20, 4))
        np.testing.assert_allclose(system.hamiltonian(states), hamiltonian(states), rtol=1e-13)

    def test_potential_method(self, system):
        assert system.potential(0.3, -0.1) == pytest.approx(potential(0.3, -0.1))

    def test_jacobian_matches_finite_differences(self, system):
        u = np.array([0.1, -0.2, 0.3, 0.05])
        J = system.jacobian(u)
        h = 1e-6
        J_fd = np.column_stack(
            [(vector_field(u + h * e) - vector_field(u - h * e)) / (2 * h) for e in np.eye(4)]
        )
        assert J.shape == (4, 4)
        np.testing.assert_allclose(J, J_fd, atol=1e-8)

    def test_energy_error_of_constant_trajectory(self, system):
        assert system.energy_error(np.tile(U0, (5, 1))) == 0.0

    def test_repr(self, system):
        assert "HenonHeiles" in repr(system)
        assert "nx=4" in repr(system)


# ============================================================================
# Test Class 4: Equilibria and Escape Energy
# ============================================================================


class TestEquilibria:
    """Test registered equilibria"""

    def test_registered_names(self, system):
        assert set(system.list_equilibria()) == {
            "origin",
            "saddle_top",
            "saddle_left",
            "saddle_right",
        }

    @pytest.mark.parametrize("name", ["origin", "saddle_top", "saddle_left", "saddle_right"])
    def test_equilibria_are_fixed_points(self, system, name):
        assert system.verify_equilibrium(system.get_equilibrium(name), tol=1e-12)

    @pytest.mark.parametrize("name", ["saddle_top", "saddle_left", "saddle_right"])
    def test_saddles_at_escape_energy(self, system, name):
        x_eq = system.get_equilibrium(name)
        assert potential(x_eq[0], x_eq[1]) == pytest.approx(ESCAPE_ENERGY)
        assert system.hamiltonian(x_eq) == pytest.approx(system.escape_energy)

    def test_escape_energy_value(self, system):
        assert system.escape_energy == pytest.approx(1.0 / 6.0)

    def test_default_state_is_bounded(self, system):
        assert system.is_bounded_energy(U0)
        assert not system.is_bounded_energy([0.0, 0.0, 0.0, 1.0])

    def test_unknown_equilibrium_raises(self, system):
        with pytest.raises(KeyError, match="Unknown equilibrium"):
            system.get_equilibrium("does_not_exist")

    def test_get_equilibrium_returns_copy(self, system):
        x_eq = system.get_equilibrium("saddle_top")
        x_eq[:] = 99.0
        assert system.get_equilibrium("saddle_top")[1] == pytest.approx(1.0)

    def test_add_non_equilibrium_raises(self):
        system = HenonHeiles()
        with pytest.raises(ValueError, match="not an equilibrium"):
            system.add_equilibrium("bogus", U0)


# ============================================================================
# Test Class 5: Linearization
# ============================================================================


class TestLinearization:
    """Test A = ∂f/∂x at equilibria"""

    def test_origin_is_center(self, system):
        """Eigenvalues ±i (twice)"""
        eigenvalues = np.linalg.eigvals(system.linearize())
        np.testing.assert_allclose(np.abs(eigenvalues.real), 0.0, atol=1e-12)
        np.testing.assert_allclose(np.sort(np.abs(eigenvalues.imag)), [1.0, 1.0, 1.0, 1.0])

    def test_linearize_by_name_and_array_agree(self, system):
        x_eq = system.get_equilibrium("saddle_left")
        np.testing.assert_array_equal(system.linearize("saddle_left"), system.linearize(x_eq))

    @pytest.mark.parametrize("name", ["saddle_top", "saddle_left", "saddle_right"])
    def test_saddles_have_real_eigenvalue_pair(self, system, name):
        """Saddle-center: one positive real eigenvalue"""
        eigenvalues = np.linalg.eigvals(system.linearize(name))
        real_parts = np.sort(eigenvalues.real)
        assert real_parts[-1] > 0.5
        assert real_parts[0] < -0.5


# ============================================================================
# Test Class 6: Coupling Strength
# ============================================================================


class TestCoupling:
    """Test the generalized potential with coupling lam"""

    def test_scaled_saddles(self):
        system = HenonHeiles(lam=2.0)
        np.testing.assert_allclose(system.get_equilibrium("saddle_top"), [0.0, 0.5, 0.0, 0.0])
        assert system.escape_energy == pytest.approx(1.0 / 24.0)
        assert system.verify_equilibrium(system.get_equilibrium("saddle_right"), tol=1e-12)

    def test_uncoupled_system(self):
        """lam = 0: two harmonic oscillators, no saddles"""
        system = HenonHeiles(lam=0.0)
        assert system.list_equilibria() == ["origin"]
        assert system.escape_energy == np.inf
        np.testing.assert_allclose(system([0.3, -0.2, 0.1, 0.4]), [0.1, 0.4, -0.3, 0.2])

    def test_parameters_recorded(self):
        system = HenonHeiles(lam=0.5)
        assert system.lam == 0.5
        assert list(system.parameters.values()) == [0.5]


# ============================================================================
# Test Class 7: Configuration Export
# ============================================================================


class TestConfiguration:
    """Test get_config_dict / save_config"""

    def test_config_dict(self, system):
        config = system.get_config_dict()
        assert config["class_name"] == "HenonHeiles"
        assert config["nx"] == 4
        assert config["parameters"] == {"lambda": 1.0}
        assert "saddle_top" in config["equilibria"]
        assert "p_x" in config["hamiltonian"]

    def test_save_config(self, system, tmp_path):
        path = tmp_path / "henon_heiles.json"
        system.save_config(str(path))
        with open(path) as f:
            loaded = json.load(f)
        assert loaded["state_vars"] == ["x", "y", "p_x", "p_y"]

    def test_print_equations(self, system, capsys):
        system.print_equations()
        out = capsys.readouterr().out
        assert "Hamiltonian" in out
        assert "dp_x/dt" in out
