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
Plotting Themes and Color Schemes

Shared palettes and figure styling so every plot in the package looks the
same.

Main Classes
------------
ColorSchemes : Color palette definitions
    PLOTLY : Default Plotly colors (one per solver or trajectory)
    COLORBLIND_SAFE : Wong palette (colorblind accessible)
    POTENTIAL : Continuous colorscale for V(x, y)

PlotThemes : Complete theme configurations
    DEFAULT : Standard Plotly white theme
    PUBLICATION : Publication-ready styling
    DARK : Dark mode theme

Usage
-----
>>> colors = ColorSchemes.get_colors('colorblind_safe', n_colors=3)
>>> fig = PlotThemes.apply_theme(fig, theme='publication')
"""

from typing import Dict, List, Optional, Union

import plotly.graph_objects as go


class ColorSchemes:
    """
    Predefined color palettes for plotting.

    Categorical palettes cycle when more colors are requested than they
    contain.
    """

    PLOTLY = [
        "#636EFA",  # Blue
        "#EF553B",  # Red
        "#00CC96",  # Green
        "#AB63FA",  # Purple
        "#FFA15A",  # Orange
        "#19D3F3",  # Cyan
        "#FF6692",  # Pink
        "#B6E880",  # Light green
        "#FF97FF",  # Light purple
        "#FECB52",  # Yellow
    ]

    COLORBLIND_SAFE = [
        "#0173B2",  # Blue
        "#DE8F05",  # Orange
        "#029E73",  # Green
        "#CC78BC",  # Pink
        "#CA9161",  # Tan
        "#949494",  # Gray
        "#ECE133",  # Yellow
        "#56B4E9",  # Sky blue
    ]

    # Named Plotly colorscale used for potential contours and surfaces
    POTENTIAL = "Viridis"

    @staticmethod
    def get_colors(scheme: str = "plotly", n_colors: Optional[int] = None) -> List[str]:
        """
        Get color palette by name.

        Parameters
        ----------
        scheme : str
            'plotly' or 'colorblind_safe' (alias 'wong')
        n_colors : Optional[int]
            Number of colors needed; cycles through the palette

        Returns
        -------
        List[str]
            Hex color codes

        Raises
        ------
        ValueError
            If scheme name is not recognized
        """
        scheme_lower = scheme.lower().replace("-", "_").replace(" ", "_")

        if scheme_lower == "plotly":
            palette = ColorSchemes.PLOTLY
        elif scheme_lower in ["colorblind_safe", "wong"]:
            palette = ColorSchemes.COLORBLIND_SAFE
        else:
            raise ValueError(
                f"Unknown color scheme '{scheme}'. Available: plotly, colorblind_safe"
            )

        if n_colors is None:
            return palette.copy()
        return [palette[i % len(palette)] for i in range(n_colors)]


class PlotThemes:
    """
    Complete plotting theme configurations.

    Examples
    --------
    >>> fig = PlotThemes.apply_theme(fig, theme='dark')
    >>>
    >>> custom = dict(PlotThemes.DEFAULT, font_size=16)
    >>> fig = PlotThemes.apply_theme(fig, theme=custom)
    """

    DEFAULT = {
        "template": "plotly_white",
        "font_family": "Arial, sans-serif",
        "font_size": 12,
        "line_width": 2,
    }

    PUBLICATION = {
        "template": "simple_white",
        "font_family": "Times New Roman, serif",
        "font_size": 14,
        "line_width": 2.5,
        "showlegend": True,
    }

    DARK = {
        "template": "plotly_dark",
        "font_family": "Arial, sans-serif",
        "font_size": 12,
        "line_width": 2,
    }

    @staticmethod
    def apply_theme(fig: go.Figure, theme: Union[str, Dict] = "default") -> go.Figure:
        """
        Apply a theme to a Plotly figure in place.

        Parameters
        ----------
        fig : go.Figure
            Figure to style
        theme : str or dict
            'default', 'publication', 'dark', or a custom dictionary

        Returns
        -------
        go.Figure
            The same figure, styled

        Raises
        ------
        ValueError
            Unknown theme name
        TypeError
            Theme is neither str nor dict
        """
        if isinstance(theme, str):
            presets = {
                "default": PlotThemes.DEFAULT,
                "publication": PlotThemes.PUBLICATION,
                "dark": PlotThemes.DARK,
            }
            if theme.lower() not in presets:
                raise ValueError(
                    f"Unknown theme '{theme}'. Available: default, publication, dark"
                )
            config = presets[theme.lower()]
        elif isinstance(theme, dict):
            config = theme
        else:
            raise TypeError("theme must be str or dict")

        if "template" in config:
            fig.update_layout(template=config["template"])

        font = {}
        if "font_family" in config:
            font["family"] = config["font_family"]
        if "font_size" in config:
            font["size"] = config["font_size"]
        if font:
            fig.update_layout(font=font)

        if "showlegend" in config:
            fig.update_layout(showlegend=config["showlegend"])

        # Only line traces; contours and surfaces keep their own styling
        if "line_width" in config:
            for trace in fig.data:
                if isinstance(trace, go.Scatter) and trace.mode == "lines":
                    trace.line.width = config["line_width"]

        return fig


__all__ = ["ColorSchemes", "PlotThemes"]
