"""
Tests for the PostScript-subset interpreter (graphics state, paths, text, pages).
"""

import pytest

from litps import ConversionOptions, ErrorCode, ErrorSink, PostScriptParser, Severity
from litps.core.model import BoundingBox, PathOp
from litps.core.transform import CoordinateTransform

A4_H = 841.890


def parse(text, options=None):
    parser = PostScriptParser(options)
    model, ok = parser.parse(text, ErrorSink())
    assert ok
    return parser, model


# --------------------------------------------------------------------------- #
# Coordinate Transform
# --------------------------------------------------------------------------- #

class TestCoordinateTransform:
    def test_default_a4_is_identity_with_flip(self):
        t = CoordinateTransform.from_bbox(BoundingBox(), 595.276, A4_H)
        assert t.scale == pytest.approx(1.0)
        assert t.offset_x == pytest.approx(0.0)
        assert t.offset_y == pytest.approx(0.0)
        assert t.apply(100, 100) == pytest.approx((100.0, A4_H - 100))

    def test_square_box_fits_width_and_centers(self):
        t = CoordinateTransform.from_bbox(BoundingBox(0, 0, 200, 200, True), 595.276, A4_H)
        assert t.scale == pytest.approx(595.276 / 200)
        assert t.offset_x == pytest.approx(0.0)
        assert t.offset_y == pytest.approx((A4_H - 595.276) / 2)
        x, y = t.apply(10, 10)
        assert x == pytest.approx(10 * t.scale)
        assert y == pytest.approx(A4_H - (10 * t.scale + t.offset_y))

    def test_delta_flips_y(self):
        t = CoordinateTransform(scale=2.0)
        assert t.apply_delta(3, 4) == (6.0, -8.0)

    def test_degenerate_box_rejected(self):
        with pytest.raises(ValueError):
            CoordinateTransform.from_bbox(BoundingBox(0, 0, 0, 100, True))


# --------------------------------------------------------------------------- #
# Paths
# --------------------------------------------------------------------------- #

class TestPaths:
    def test_moveto_lineto_stroke_default_transform(self):
        _, model = parse("100 100 moveto 200 200 lineto stroke")
        assert model.page_count == 1
        paths = model.pages[0].paths
        assert [p.op for p in paths] == [PathOp.MOVE_TO, PathOp.LINE_TO]
        assert paths[0].points == pytest.approx((100.0, A4_H - 100))
        assert paths[1].points == pytest.approx((200.0, A4_H - 200))

    def test_abbreviated_operators(self):
        _, model = parse("10 10 m\n20 20 l\n30 30 40 40 50 50 c\nh\nS")
        ops = [p.op for p in model.pages[0].paths]
        assert ops == [PathOp.MOVE_TO, PathOp.LINE_TO, PathOp.CURVE_TO, PathOp.CLOSE_PATH]

    def test_curveto_transforms_all_points(self):
        _, model = parse("0 0 moveto 10 20 30 40 50 60 curveto stroke")
        curve = model.pages[0].paths[1]
        assert curve.points == pytest.approx((10, A4_H - 20, 30, A4_H - 40, 50, A4_H - 60))

    def test_path_not_on_page_until_painted(self):
        parser, model = parse("10 10 moveto 20 20 lineto")
        assert model.pages[0].paths == []
        assert any("unpainted path" in w for w in model.warnings)

    def test_fill_flushes_path(self):
        _, model = parse("10 10 moveto 20 20 lineto 20 10 lineto closepath fill")
        assert len(model.pages[0].paths) == 4

    def test_newpath_discards_pending(self):
        _, model = parse("10 10 moveto 20 20 lineto newpath 1 1 moveto 2 2 lineto stroke")
        assert len(model.pages[0].paths) == 2
        assert model.pages[0].paths[0].points == pytest.approx((1, A4_H - 1))

    def test_rmoveto_rlineto(self):
        _, model = parse("100 100 moveto 10 20 rmoveto 5 0 rlineto stroke")
        paths = model.pages[0].paths
        assert paths[1].points == pytest.approx((110, A4_H - 120))
        assert paths[2].points == pytest.approx((115, A4_H - 120))

    def test_relative_without_current_point_warns(self):
        _, model = parse("10 10 rlineto")
        assert len(model.warnings) == 1
        assert "current point" in model.warnings[0]

    def test_closepath_returns_to_subpath_start(self):
        parser, _ = parse("10 10 moveto 50 50 lineto closepath stroke")
        assert (parser.state.x, parser.state.y) == pytest.approx((10, A4_H - 10))


# --------------------------------------------------------------------------- #
# Graphics State
# --------------------------------------------------------------------------- #

class TestGraphicsState:
    def test_setlinewidth(self):
        parser, _ = parse("2.5 setlinewidth")
        assert parser.state.line_width == 2.5

    def test_abbreviated_line_width_and_color(self):
        parser, _ = parse("3 w 0 0.5 1 rg")
        assert parser.state.line_width == 3
        assert parser.state.color == (0.0, 0.5, 1.0)

    def test_color_clamped(self):
        parser, _ = parse("2 -1 0.5 setrgbcolor")
        assert parser.state.color == (1.0, 0.0, 0.5)

    def test_setgray(self):
        parser, _ = parse("0.25 setgray")
        assert parser.state.color == (0.25, 0.25, 0.25)

    def test_gsave_grestore_restores_everything(self):
        parser, model = parse(
            "1 0 0 setrgbcolor 2 setlinewidth\n"
            "gsave 0 1 0 setrgbcolor 7 setlinewidth 50 50 moveto grestore\n"
        )
        assert parser.state.color == (1.0, 0.0, 0.0)
        assert parser.state.line_width == 2
        assert (parser.state.x, parser.state.y) == (0.0, 0.0)

    def test_nested_save_restore(self):
        parser, _ = parse("1 w q 2 w q 3 w Q Q")
        assert parser.state.line_width == 1

    def test_grestore_underflow_is_silent(self):
        parser, model = parse("grestore Q 4 w")
        assert model.warnings == []
        assert parser.state.line_width == 4

    def test_gsave_copies_matrix(self):
        parser, _ = parse("gsave")
        parser.state.matrix[0] = 9.0
        assert parser.state_stack[0].matrix[0] == 1.0


# --------------------------------------------------------------------------- #
# Text
# --------------------------------------------------------------------------- #

class TestText:
    def test_show_at_current_point_with_state(self):
        _, model = parse("0 0 1 setrgbcolor 72 72 moveto (Hello World) show")
        texts = model.pages[0].texts
        assert len(texts) == 1
        item = texts[0]
        assert item.text == "Hello World"
        assert (item.x, item.y) == pytest.approx((72, A4_H - 72))
        assert item.color == (0.0, 0.0, 1.0)
        assert item.font_name == "Helvetica"
        assert item.font_size == 12.0

    def test_tj_alias(self):
        _, model = parse("10 10 m (abc) Tj")
        assert model.pages[0].texts[0].text == "abc"

    def test_show_after_curveto_uses_end_point(self):
        _, model = parse("0 0 moveto 10 20 30 40 50 60 curveto stroke (t) show")
        item = model.pages[0].texts[0]
        assert (item.x, item.y) == pytest.approx((50, A4_H - 60))

    def test_font_operators(self):
        _, model = parse("/Times-Roman findfont 24 scalefont setfont\n10 10 moveto (x) show")
        item = model.pages[0].texts[0]
        assert item.font_name == "Times-Roman"
        assert item.font_size == 24

    def test_selectfont(self):
        _, model = parse("/Courier 9 selectfont 10 10 moveto (x) show")
        item = model.pages[0].texts[0]
        assert (item.font_name, item.font_size) == ("Courier", 9)

    def test_show_without_string_warns(self):
        _, model = parse("10 10 moveto 42 show")
        assert model.pages[0].texts == []
        assert len(model.warnings) == 1

    def test_string_spanning_spaces_shows_whole(self):
        _, model = parse("10 10 moveto (a  b   c) show")
        assert model.pages[0].texts[0].text == "a  b   c"


# --------------------------------------------------------------------------- #
# Pages (showpage policy)
# --------------------------------------------------------------------------- #

class TestShowpage:
    def test_empty_input_has_one_page(self):
        _, model = parse("")
        assert model.page_count == 1
        assert model.pages[0].is_empty

    def test_trailing_empty_page_trimmed(self):
        _, model = parse("10 10 moveto 20 20 lineto stroke\nshowpage\n")
        assert model.page_count == 1

    def test_content_after_last_showpage_kept(self):
        _, model = parse(
            "10 10 moveto 20 20 lineto stroke showpage\n"
            "30 30 moveto 40 40 lineto stroke showpage\n"
            "50 50 moveto (tail) show\n"
        )
        assert model.page_count == 3
        assert model.pages[2].texts[0].text == "tail"

    @pytest.mark.parametrize("n", [1, 2, 5])
    def test_each_showpage_seals_one_page(self, n):
        _, model = parse("showpage\n" * n)
        assert model.page_count == n

    def test_pages_use_target_size(self):
        options = ConversionOptions.for_paper('letter')
        _, model = parse("showpage", options)
        assert (model.pages[0].width, model.pages[0].height) == (612.0, 792.0)

    def test_elements_go_to_current_page(self):
        _, model = parse("1 1 m 2 2 l S showpage 3 3 m 4 4 l S (x) show")
        assert len(model.pages[0].paths) == 2
        assert model.pages[0].texts == []
        assert len(model.pages[1].paths) == 2
        assert len(model.pages[1].texts) == 1


# --------------------------------------------------------------------------- #
# Header / Errors
# --------------------------------------------------------------------------- #

class TestDocument:
    def test_header_metadata(self, sample_ps):
        _, model = parse(sample_ps)
        assert model.title == "Sample Drawing"
        assert model.creator == "hand written"
        assert model.dsc_compliant
        assert model.bbox.as_tuple() == (0, 0, 200, 200)

    def test_sample_document(self, sample_ps):
        _, model = parse(sample_ps)
        assert model.page_count == 1
        page = model.pages[0]
        assert len(page.paths) == 2
        assert page.texts[0].text == "Hello (PDF) World"
        assert page.texts[0].font_size == 14

    def test_bounding_box_scales_coordinates(self):
        _, model = parse("%%BoundingBox: 0 0 200 200\n10 10 moveto 190 190 lineto stroke")
        scale = 595.276 / 200
        offset_y = (A4_H - 200 * scale) / 2
        move = model.pages[0].paths[0]
        assert move.points == pytest.approx((10 * scale, A4_H - (10 * scale + offset_y)))

    def test_degenerate_bbox_falls_back(self):
        _, model = parse("%%BoundingBox: 0 0 0 0\n100 100 moveto 200 200 lineto stroke")
        assert model.bbox.as_tuple() == (0, 0, 0, 0)
        assert model.pages[0].paths[0].points == pytest.approx((100, A4_H - 100))
        assert any("Degenerate" in w for w in model.warnings)


class TestMalformedInput:
    def test_bad_lines_skipped_and_rest_parsed(self):
        sink = ErrorSink()
        model, ok = PostScriptParser().parse(
            "10 10 moveto\n"
            "moveto\n"
            "(unterminated show\n"
            "abc 5 lineto\n"
            "20 20 lineto stroke\n",
            sink,
        )
        assert ok
        assert [p.op for p in model.pages[0].paths] == [PathOp.MOVE_TO, PathOp.LINE_TO]
        assert len(model.warnings) == 3
        assert sink.warnings == model.warnings
        assert not sink.has_error

    def test_unknown_operators_ignored(self):
        _, model = parse("1 2 add pop 10 10 moveto 20 20 lineto stroke")
        assert model.warnings == []
        assert len(model.pages[0].paths) == 2

    def test_negative_line_width_rejected(self):
        parser, model = parse("-1 setlinewidth")
        assert parser.state.line_width == 1.0
        assert len(model.warnings) == 1

    def test_warnings_are_logged(self, caplog):
        with caplog.at_level("WARNING", logger="litps"):
            parse("moveto")
        assert any("moveto" in r.getMessage() for r in caplog.records)

    def test_unreadable_file_is_fatal(self, tmp_path):
        sink = ErrorSink()
        model, ok = PostScriptParser().parse_file(str(tmp_path / "missing.ps"), sink)
        assert model is None
        assert not ok
        assert sink.last_error.code == ErrorCode.INPUT_UNREADABLE

    def test_latin1_file_decoded(self, tmp_path):
        path = tmp_path / "latin.ps"
        path.write_bytes(b"10 10 moveto (caf\xe9) show\n")
        sink = ErrorSink()
        model, ok = PostScriptParser().parse_file(str(path), sink)
        assert ok
        assert model.pages[0].texts[0].text == "café"
        assert ("PostScript parsing completed: 1 page(s), 0 warning(s)", Severity.INFO) in sink.messages


# --------------------------------------------------------------------------- #
# Numeric range
# --------------------------------------------------------------------------- #

HUGE_RADIX = "36#" + "Z" * 250


class TestNumericRange:
    def test_overflowing_radix_operand_warns(self):
        sink = ErrorSink()
        model, ok = PostScriptParser().parse(
            f"{HUGE_RADIX} 100 moveto\n10 10 moveto 20 20 lineto stroke\n", sink
        )
        assert ok
        assert len(model.warnings) == 1
        assert "moveto" in model.warnings[0]
        assert len(model.pages[0].paths) == 2
        assert not sink.has_error

    def test_overflowing_radix_bounding_box_ignored(self):
        _, model = parse(f"%%BoundingBox: 0 0 {HUGE_RADIX} 200\n100 100 moveto 200 200 lineto stroke")
        assert not model.bbox.valid
        assert any("ignoring bounding box" in w for w in model.warnings)
        assert model.pages[0].paths[0].points == pytest.approx((100, A4_H - 100))

    def test_infinite_operand_warns(self):
        _, model = parse("1e400 100 moveto 10 10 moveto 20 20 lineto stroke")
        assert len(model.warnings) == 1
        assert model.pages[0].paths[0].points == pytest.approx((10, A4_H - 10))

    def test_infinite_bounding_box_ignored(self):
        _, model = parse("%%BoundingBox: 0 0 1e400 200\n100 100 moveto 200 200 lineto stroke")
        assert not model.bbox.valid
        assert model.pages[0].paths[0].points == pytest.approx((100, A4_H - 100))

    def test_overflowing_bounding_box_width_falls_back(self):
        _, model = parse("%%BoundingBox: -1e308 0 1e308 200\n100 100 moveto 200 200 lineto stroke")
        assert any("Degenerate" in w for w in model.warnings)
        assert model.pages[0].paths[0].points == pytest.approx((100, A4_H - 100))

    def test_point_overflowing_after_transform_warns(self):
        _, model = parse("%%BoundingBox: 0 0 1 1\n1e308 1e308 moveto")
        assert model.pages[0].paths == []
        assert any("out of range" in w for w in model.warnings)

    def test_infinite_line_width_and_font_size_rejected(self):
        parser, model = parse("1e400 setlinewidth 1e400 scalefont")
        assert parser.state.line_width == 1.0
        assert parser.state.font_size == 12.0
        assert len(model.warnings) == 2


# --------------------------------------------------------------------------- #
# Current point
# --------------------------------------------------------------------------- #

class TestCurrentPoint:
    def test_show_without_current_point_warns(self):
        _, model = parse("(orphan) show")
        assert model.pages[0].texts == []
        assert len(model.warnings) == 1
        assert "current point" in model.warnings[0]

    def test_grestore_restores_current_point_flag(self):
        _, model = parse("gsave 10 10 moveto grestore (x) show")
        assert model.pages[0].texts == []
        assert any("current point" in w for w in model.warnings)

    def test_grestore_restores_subpath_start(self):
        parser, _ = parse(
            "10 10 moveto gsave 50 50 moveto grestore 30 30 lineto closepath stroke"
        )
        assert (parser.state.x, parser.state.y) == pytest.approx((10, A4_H - 10))

    def test_gsave_keeps_current_point(self):
        _, model = parse("72 72 moveto gsave (x) show grestore")
        assert (model.pages[0].texts[0].x, model.pages[0].texts[0].y) == pytest.approx((72, A4_H - 72))
