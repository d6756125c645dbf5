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
Unit tests for IntegratorFactory

Tests cover:
1. Creation from presets and method names
2. Fixed-step methods require dt
3. Options pass through to the integrator
4. Convenience constructors and info helpers
"""

import numpy as np
import pytest

from hhsym.systems.base.numerical_integration import (
    IntegratorFactory,
    RK4Integrator,
    ScipyIntegrator,
    SolverPreset,
    create_integrator,
)
from hhsym.systems.builtin.henon_heiles import vector_field


# ============================================================================
# Test Class 1: Creation
# ============================================================================


class TestCreate:
    """Test IntegratorFactory.create()"""

    def test_default_is_rk45(self):
        integrator = IntegratorFactory.create(vector_field)
        assert isinstance(integrator, ScipyIntegrator)
        assert integrator.method == "RK45"

    @pytest.mark.parametrize(
        "preset, method",
        [
            (SolverPreset.EXPLICIT_LOW_ORDER, "RK23"),
            (SolverPreset.IMPLICIT_STIFF, "Radau"),
            ("adaptive_default", "RK45"),
            ("high_order", "DOP853"),
            ("auto_stiffness", "LSODA"),
        ],
    )
    def test_presets(self, preset, method):
        integrator = IntegratorFactory.create(vector_field, method=preset)
        assert isinstance(integrator, ScipyIntegrator)
        assert integrator.method == method

    def test_lowercase_method_name(self):
        assert IntegratorFactory.create(vector_field, method="bdf").method == "BDF"

    def test_fixed_step(self):
        integrator = IntegratorFactory.create(vector_field, method="fixed_rk4", dt=0.05)
        assert isinstance(integrator, RK4Integrator)
        assert integrator.dt == 0.05

    def test_fixed_step_requires_dt(self):
        with pytest.raises(ValueError, match="requires dt"):
            IntegratorFactory.create(vector_field, method="rk4")

    def test_unknown_method(self):
        with pytest.raises(ValueError, match="Invalid method"):
            IntegratorFactory.create(vector_field, method="not_a_solver")

    def test_options_forwarded(self):
        integrator = IntegratorFactory.create(
            vector_field, method="RK23", rtol=1e-9, atol=1e-11, track_memory=True
        )
        assert integrator.rtol == 1e-9
        assert integrator.atol == 1e-11
        assert integrator.track_memory

    def test_non_numpy_backend_rejected(self):
        with pytest.raises(ValueError, match="numpy"):
            IntegratorFactory.create(vector_field, backend="torch")


# ============================================================================
# Test Class 2: Convenience Constructors
# ============================================================================


class TestConvenience:
    """Test shortcut constructors and helpers"""

    def test_for_production(self):
        integrator = IntegratorFactory.for_production(vector_field)
        assert integrator.method == "RK45"
        assert integrator.rtol == 1e-8
        assert integrator.atol == 1e-10

    def test_for_production_override(self):
        assert IntegratorFactory.for_production(vector_field, rtol=1e-6).rtol == 1e-6

    def test_for_stiff(self):
        assert IntegratorFactory.for_stiff(vector_field).method == "Radau"

    def test_for_simple(self):
        integrator = IntegratorFactory.for_simple(vector_field)
        assert isinstance(integrator, RK4Integrator)
        assert integrator.dt == 0.01

    def test_create_integrator_alias(self):
        integrator = create_integrator(vector_field, method="explicit_low_order", rtol=1e-7)
        assert integrator.method == "RK23"
        assert integrator.rtol == 1e-7

    def test_get_info_lists_presets(self):
        info = IntegratorFactory.get_info("Radau")
        assert info["implicit"]
        assert info["presets"] == ["implicit_stiff"]

    def test_list_methods(self):
        assert "fixed_rk4" in IntegratorFactory.list_methods()["presets"]

    def test_created_integrator_runs(self):
        integrator = IntegratorFactory.create(vector_field, method="explicit_low_order")
        result = integrator.integrate(np.array([0.2, 0.0, 0.4, 0.0]), (0.0, 1.0))
        assert result["success"]
