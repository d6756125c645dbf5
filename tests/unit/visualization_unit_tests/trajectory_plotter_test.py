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
Unit Tests for Trajectory Plotter

Tests time series, energy error and solver comparison figures.
"""

import numpy as np
import plotly.graph_objects as go
import pytest

from hhsym.simulation import SimulationConfig, compare_solvers, simulate
from hhsym.visualization.trajectory_plotter import STATE_NAMES, TrajectoryPlotter

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def plotter():
    return TrajectoryPlotter()


@pytest.fixture(scope="module")
def result():
    return simulate(SimulationConfig(t_span=(0.0, 10.0), n_samples=101))


@pytest.fixture(scope="module")
def comparison():
    return compare_solvers(SimulationConfig(t_span=(0.0, 5.0), n_samples=51))


# ============================================================================
# plot_trajectory
# ============================================================================


class TestPlotTrajectory:
    """Test state-versus-time figures."""

    def test_one_trace_per_state(self, plotter, result):
        fig = plotter.plot_trajectory(result)
        assert isinstance(fig, go.Figure)
        assert [t.name for t in fig.data] == list(STATE_NAMES)

    def test_trace_data(self, plotter, result):
        fig = plotter.plot_trajectory(result)
        np.testing.assert_array_equal(fig.data[2].x, result["t"])
        np.testing.assert_array_equal(fig.data[2].y, result["x"][:, 2])

    def test_shared_time_axis_title(self, plotter, result):
        fig = plotter.plot_trajectory(result)
        assert fig.layout.xaxis4.title.text == "Time"

    def test_wrong_state_names(self, plotter, result):
        with pytest.raises(ValueError, match="Expected trajectory"):
            plotter.plot_trajectory(result, state_names=("x", "y"))


# ============================================================================
# plot_energy
# ============================================================================


class TestPlotEnergy:
    """Test energy error figures."""

    def test_single_result(self, plotter, result):
        fig = plotter.plot_energy(result)
        assert len(fig.data) == 1
        assert fig.data[0].name == "scipy.RK45"
        assert fig.layout.yaxis.type == "log"

    def test_log_scale_drops_first_sample(self, plotter, result):
        fig = plotter.plot_energy(result)
        assert len(fig.data[0].x) == len(result["t"]) - 1

    def test_linear_scale(self, plotter, result):
        fig = plotter.plot_energy(result, log_scale=False)
        assert len(fig.data[0].y) == len(result["t"])
        assert fig.data[0].y[0] == 0.0
        assert np.all(np.asarray(fig.data[0].y) < 1e-6)

    def test_multiple_results(self, plotter, comparison):
        fig = plotter.plot_energy(comparison["results"])
        assert [t.name for t in fig.data] == list(comparison["results"])


# ============================================================================
# plot_solver_comparison
# ============================================================================


class TestPlotSolverComparison:
    """Test solver comparison bar charts."""

    def test_three_panels(self, plotter, comparison):
        fig = plotter.plot_solver_comparison(comparison)
        assert len(fig.data) == 3
        assert all(isinstance(t, go.Bar) for t in fig.data)

    def test_bar_values(self, plotter, comparison):
        fig = plotter.plot_solver_comparison(comparison)
        expected = [s["nfev"] for s in comparison["summaries"].values()]
        assert list(fig.data[0].y) == expected
        assert list(fig.data[0].x) == list(comparison["summaries"])

    def test_default_title(self, plotter, comparison):
        fig = plotter.plot_solver_comparison(comparison)
        assert "explicit_low_order" in fig.layout.title.text
