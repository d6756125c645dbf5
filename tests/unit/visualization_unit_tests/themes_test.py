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
Unit Tests for Plotting Themes

Tests color palettes and theme application.
"""

import plotly.graph_objects as go
import pytest

from hhsym.visualization.themes import ColorSchemes, PlotThemes


class TestColorSchemes:
    """Test palette lookup."""

    def test_full_palette(self):
        assert ColorSchemes.get_colors("plotly") == ColorSchemes.PLOTLY

    def test_palette_is_copy(self):
        colors = ColorSchemes.get_colors("plotly")
        colors.append("#000000")
        assert len(ColorSchemes.PLOTLY) == 10

    def test_cycling(self):
        colors = ColorSchemes.get_colors("colorblind_safe", n_colors=10)
        assert len(colors) == 10
        assert colors[8] == colors[0]

    def test_alias_and_normalization(self):
        assert ColorSchemes.get_colors("Wong") == ColorSchemes.COLORBLIND_SAFE
        assert ColorSchemes.get_colors("colorblind-safe", 2) == ColorSchemes.COLORBLIND_SAFE[:2]

    def test_unknown_scheme(self):
        with pytest.raises(ValueError, match="Unknown color scheme"):
            ColorSchemes.get_colors("rainbow")


class TestPlotThemes:
    """Test theme application."""

    @pytest.fixture
    def fig(self):
        fig = go.Figure()
        fig.add_trace(go.Scatter(x=[0, 1], y=[0, 1], mode="lines", line=dict(width=1)))
        fig.add_trace(go.Scatter(x=[0], y=[0], mode="markers"))
        return fig

    def test_publication(self, fig):
        PlotThemes.apply_theme(fig, "publication")
        assert fig.layout.font.size == 14
        assert fig.layout.showlegend is True
        assert fig.data[0].line.width == 2.5

    def test_dark_template(self, fig):
        PlotThemes.apply_theme(fig, "dark")
        assert fig.layout.template.layout.paper_bgcolor is not None

    def test_custom_dict(self, fig):
        PlotThemes.apply_theme(fig, {"font_size": 20})
        assert fig.layout.font.size == 20
        assert fig.data[0].line.width == 1

    def test_unknown_theme(self, fig):
        with pytest.raises(ValueError, match="Unknown theme"):
            PlotThemes.apply_theme(fig, "neon")

    def test_invalid_type(self, fig):
        with pytest.raises(TypeError):
            PlotThemes.apply_theme(fig, 42)
