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
Unit tests for the command-line interface

Tests cover:
1. Default text summary
2. JSON output for single runs and comparisons
3. Configuration files and flag overrides
4. Exit codes for invalid configuration and failed integration
5. HTML figure export
"""

import json

import pytest

from hhsym.__main__ import _build_config, _parse_args, main
from hhsym.simulation import SimulationConfig


# ============================================================================
# Test Class 1: Argument Handling
# ============================================================================


class TestArguments:
    """Test flag parsing and config construction"""

    def test_defaults(self):
        config = _build_config(_parse_args([]))
        assert config == SimulationConfig()

    def test_overrides(self):
        args = _parse_args(
            ["--solver", "explicit_low_order", "--t-end", "25", "--rtol", "1e-7", "--samples", "11"]
        )
        config = _build_config(args)
        assert config.solver == "explicit_low_order"
        assert config.t_span == (0.0, 25.0)
        assert config.rtol == 1e-7
        assert config.n_samples == 11

    def test_config_file_then_overrides(self, tmp_path):
        path = tmp_path / "run.json"
        SimulationConfig(t_span=(0.0, 30.0), solver="implicit_stiff", lam=0.5).save(str(path))

        config = _build_config(_parse_args(["--config", str(path), "--atol", "1e-9"]))
        assert config.solver == "implicit_stiff"
        assert config.lam == 0.5
        assert config.t_span == (0.0, 30.0)
        assert config.atol == 1e-9


# ============================================================================
# Test Class 2: Runs
# ============================================================================


class TestMain:
    """Test main() end to end"""

    def test_text_summary(self, capsys):
        assert main(["--t-end", "5"]) == 0
        out = capsys.readouterr().out
        assert "scipy.RK45" in out
        assert "0.1000000000" in out

    def test_json_summary(self, capsys):
        assert main(["--t-end", "5", "--solver", "rk23", "--json", "--track-memory"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["method"] == "RK23"
        assert payload["initial_energy"] == pytest.approx(0.1)
        assert payload["energy_error"] < 1e-6
        assert len(payload["final_state"]) == 4
        assert payload["peak_memory"] > 0

    def test_fixed_step_run(self, capsys):
        assert main(["--t-end", "2", "--solver", "fixed_rk4", "--dt", "0.01", "--json"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["n_points"] == 201

    def test_compare_json(self, capsys):
        assert main(["--compare", "--t-end", "5", "--samples", "51", "--json"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["reference"] == "explicit_low_order"
        assert set(payload["summaries"]) == {
            "explicit_low_order",
            "implicit_stiff",
            "adaptive_default",
        }

    def test_compare_table(self, capsys):
        assert main(["--compare", "--t-end", "5", "--samples", "51"]) == 0
        out = capsys.readouterr().out
        assert "preset" in out
        assert "Radau" in out

    @pytest.mark.parametrize(
        "extra", [["--solver", "implicit_stiff"], ["--dt", "0.01"], ["--solver", "rk4", "--dt", "0.01"]]
    )
    def test_compare_rejects_single_solver_options(self, extra, capsys):
        assert main(["--compare", "--t-end", "2"] + extra) == 2
        err = capsys.readouterr().err
        assert "invalid configuration" in err
        assert "--compare" in err

    def test_invalid_solver(self, capsys):
        assert main(["--solver", "tsit5"]) == 2
        assert "invalid configuration" in capsys.readouterr().err

    def test_missing_config_file(self, tmp_path, capsys):
        assert main(["--config", str(tmp_path / "missing.json")]) == 2

    def test_failed_integration(self, tmp_path, capsys):
        path = tmp_path / "escape.json"
        SimulationConfig(x0=(0.0, 0.0, 0.0, 1.0), t_span=(0.0, 50.0)).save(str(path))

        with pytest.warns(RuntimeWarning):
            assert main(["--config", str(path)]) == 1
        assert "integration failed" in capsys.readouterr().err


# ============================================================================
# Test Class 3: Figures
# ============================================================================


class TestPlotExport:
    """Test --plot"""

    def test_single_run_figures(self, tmp_path, capsys):
        out_dir = tmp_path / "figures"
        assert main(["--t-end", "2", "--plot", str(out_dir)]) == 0

        written = sorted(p.name for p in out_dir.iterdir())
        assert written == [
            "configuration_space.html",
            "energy.html",
            "potential_contour.html",
            "potential_surface.html",
            "trajectory.html",
        ]

    def test_comparison_figures(self, tmp_path, capsys):
        out_dir = tmp_path / "figures"
        assert main(["--compare", "--t-end", "2", "--samples", "21", "--plot", str(out_dir)]) == 0
        assert (out_dir / "solver_comparison.html").exists()
