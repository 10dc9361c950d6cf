from __future__ import annotations

import inspect
from datetime import datetime
from typing import get_args
from unittest.mock import patch

import plotly.graph_objects as go
import pytest

from graph_visualizer.session import GraphSession, default_export_filename
from graph_visualizer.themes import THEMES, ThemeName
from graph_visualizer.viewport import GraphPoint, Viewport


def test_add_equation_validates_first() -> None:
    session = GraphSession((800, 600))
    result, eq = session.add_equation("x^2", color="red")
    assert result.is_valid and eq is not None
    assert session.equations == (eq,)

    bad, missing = session.add_equation("x2")
    assert not bad.is_valid
    assert bad.error == "Invalid symbol: 'x2'"
    assert missing is None
    assert len(session.equations) == 1


def test_width_alias() -> None:
    session = GraphSession()
    _, eq = session.add_equation("x", width=4)
    assert eq.line_width == 4.0
    with pytest.raises(ValueError, match="both line_width= and width="):
        session.add_equation("x", width=4, line_width=3)


def test_remove_and_lookup_equations() -> None:
    session = GraphSession()
    _, a = session.add_equation("x")
    _, b = session.add_equation("x^2")
    assert session.get_equation(b.id) is b
    assert session.remove_equation(a.id) is a
    assert session.equations == (b,)
    with pytest.raises(KeyError, match="Unknown equation"):
        session.remove_equation(a.id)
    session.clear_equations()
    assert session.equations == ()


def test_zoom_setter_clamps() -> None:
    session = GraphSession()
    session.zoom = 3.0
    assert session.zoom == 2.0
    session.zoom = 0.1
    assert session.zoom == 0.5


def test_viewport_callbacks_fire_on_change_only() -> None:
    seen = []
    session = GraphSession(on_viewport_change=seen.append)
    session.zoom_in()
    session.zoom = 1.1
    assert [vp.zoom for vp in seen] == [1.1]

    session.zoom_out()
    session.viewport = Viewport(center=GraphPoint(2, 3))
    session.reset_view()
    assert [vp.zoom for vp in seen] == [1.1, 1.0, 1.0, 1.0]
    assert seen[-1] == Viewport()

    session.remove_viewport_callback(seen.append)
    session.zoom_in()
    assert len(seen) == 4


def test_failing_callback_is_reported_as_warning() -> None:
    def boom(viewport):
        raise RuntimeError("boom")

    session = GraphSession()
    session.add_viewport_callback(boom)
    with pytest.warns(UserWarning, match="Viewport callback"):
        session.zoom_in()
    assert session.zoom == 1.1


def test_viewport_setter_requires_viewport() -> None:
    with pytest.raises(TypeError):
        GraphSession().viewport = (0, 0)  # type: ignore[assignment]


def test_drag_pans_relative_to_drag_start() -> None:
    session = GraphSession((800, 600))
    session.begin_drag((100, 100))
    assert session.is_dragging
    session.drag_to((180, 140))
    assert session.viewport.center.x == pytest.approx(-2.0)
    assert session.viewport.center.y == pytest.approx(1.0)

    session.drag_to((100, 100))
    assert session.viewport.center.x == pytest.approx(0.0)
    assert session.viewport.center.y == pytest.approx(0.0)

    session.end_drag()
    session.drag_to((500, 500))
    assert not session.is_dragging
    assert session.viewport.center.x == pytest.approx(0.0)


def test_zoom_at_cursor() -> None:
    session = GraphSession((800, 600))
    session.zoom_at(2.0, (600, 300))
    assert session.zoom == 2.0
    # Graph x=5 stays under pixel x=600.
    assert session.viewport.center.x == pytest.approx(2.5)


def test_click_selects_and_clears_tangent() -> None:
    session = GraphSession((800, 600))
    session.add_equation("x^2")
    # Pixel of graph point (1, 1) at the default viewport.
    tangent = session.click((440, 260))
    assert tangent is not None
    assert tangent.derivative == pytest.approx(2.0, abs=0.1)
    assert session.tangent is tangent

    assert session.click((10, 10)) is None
    assert session.tangent is None


def test_equation_changes_clear_tangent() -> None:
    session = GraphSession((800, 600))
    _, eq = session.add_equation("x^2")
    for change in (
        lambda: session.add_equation("x"),
        lambda: session.set_visible(eq.id, True),
        lambda: session.clear_equations(),
    ):
        if not session.equations:
            _, eq = session.add_equation("x^2")
        assert session.click((440, 260)) is not None
        change()
        assert session.tangent is None


def test_hidden_equation_is_not_rendered() -> None:
    session = GraphSession()
    _, eq = session.add_equation("x")
    session.set_visible(eq.id, False)
    assert session.scene().items_by_role("curve") == []


def test_theme_and_pixel_ratio_validation() -> None:
    session = GraphSession()
    assert session.theme == "dark"
    session.theme = "Blue"
    assert session.theme == "blue"
    with pytest.raises(ValueError):
        session.theme = "neon"
    with pytest.raises(ValueError):
        session.device_pixel_ratio = 0


def test_resize_changes_bounds() -> None:
    session = GraphSession((800, 600))
    session.resize(400, 400)
    assert session.scene().bounds.y_max == pytest.approx(10.0)


def test_render_returns_plotly_figure() -> None:
    session = GraphSession()
    session.add_equation("sin(x)")
    fig = session.render()
    assert isinstance(fig, go.Figure)
    assert len(fig.data) == 1
    assert session.renderer.render_count == 1


def test_export_png_writes_timestamped_file(tmp_path) -> None:
    session = GraphSession(device_pixel_ratio=2)
    with patch.object(go.Figure, "to_image", return_value=b"png-bytes") as to_image:
        data = session.export_png(tmp_path)
    assert data == b"png-bytes"
    assert to_image.call_args.kwargs["scale"] == 2.0
    (written,) = tmp_path.iterdir()
    assert written.name.startswith("graph-export-") and written.suffix == ".png"
    assert written.read_bytes() == b"png-bytes"


def test_default_export_filename() -> None:
    stamp = datetime(2024, 1, 2, 3, 4, 5)
    assert default_export_filename(stamp) == "graph-export-2024-01-02T03-04-05.png"


def test_deeply_nested_equation_is_rejected() -> None:
    session = GraphSession()
    result, eq = session.add_equation("(" * 2000 + "x" + ")" * 2000)
    assert not result.is_valid and eq is None
    assert session.equations == ()


def test_equation_style_options_are_discoverable() -> None:
    options = GraphSession.equation_style_options()
    assert set(options) == {"color", "line_width", "width", "line_style", "visible"}
    accepted = inspect.signature(GraphSession.add_equation).parameters
    assert all(name in accepted for name in options)
    options["color"] = "changed"
    assert GraphSession.equation_style_options()["color"] != "changed"


def test_theme_names_match_palettes() -> None:
    assert set(get_args(ThemeName)) == set(THEMES)
    for name in get_args(ThemeName):
        session = GraphSession(theme=name)
        assert session.scene().palette == THEMES[name]
