"""Tests for units, geometry, colors and the error taxonomy."""

import pytest

from pptxforge.errors import (
    ErrorKind,
    InvalidInputError,
    OverlapError,
    PackageWriteError,
    PptxForgeError,
)
from pptxforge.schema.colors import Color, SchemeColor, optional_color
from pptxforge.schema.units import (
    EMU_PER_CM,
    EMU_PER_INCH,
    EMU_PER_PT,
    SLIDE_4X3,
    SLIDE_16X9,
    SLIDE_WIDESCREEN,
    Dimension,
    SlideSize,
    Unit,
    cm,
    degrees_to_angle,
    emu_to_cm,
    emu_to_inches,
    emu_to_pt,
    inches,
    length_to_dict,
    parse_dimension,
    pt,
    ratio,
    resolve,
    resolve_box,
)


# ---------------------------------------------------------------------------
# Dimensions
# ---------------------------------------------------------------------------

class TestDimension:

    def test_inches(self):
        assert resolve(inches(1)) == EMU_PER_INCH
        assert resolve(inches(0.5)) == 457_200

    def test_cm_and_pt(self):
        assert resolve(cm(2)) == 2 * EMU_PER_CM
        assert resolve(pt(12)) == 12 * EMU_PER_PT

    def test_ratio_of_reference(self):
        assert resolve(ratio(0.5), SLIDE_4X3.width) == 4_572_000

    def test_ratio_is_clamped(self):
        assert resolve(ratio(1.5), 1000) == 1000
        assert resolve(ratio(-0.2), 1000) == 0

    def test_negative_dimension_rejected(self):
        with pytest.raises(InvalidInputError):
            resolve(inches(-1))

    def test_plain_int_is_emu(self):
        assert resolve(914_400) == 914_400

    def test_plain_int_may_be_negative(self):
        assert resolve(-12_700) == -12_700

    def test_float_is_ambiguous(self):
        with pytest.raises(InvalidInputError):
            resolve(1.5)

    def test_bool_rejected(self):
        with pytest.raises(InvalidInputError):
            resolve(True)

    def test_overflow_rejected(self):
        with pytest.raises(InvalidInputError):
            resolve(2 ** 63)

    def test_to_dict(self):
        assert inches(1.5).to_dict() == "1.5in"
        assert ratio(0.25).to_dict() == "25%"
        assert str(cm(3)) == "3cm"


class TestParseDimension:

    def test_units(self):
        assert parse_dimension("1.5in") == inches(1.5)
        assert parse_dimension("2 cm") == cm(2)
        assert parse_dimension("12pt") == pt(12)
        assert parse_dimension("25%") == ratio(0.25)

    def test_emu_suffix_gives_int(self):
        assert parse_dimension("914400emu") == 914_400

    def test_int_passthrough(self):
        assert parse_dimension(12_700) == 12_700

    def test_dimension_passthrough(self):
        d = Dimension(3, Unit.CM)
        assert parse_dimension(d) is d

    def test_bare_float_rejected(self):
        with pytest.raises(InvalidInputError, match="ambiguous"):
            parse_dimension(2.5)

    def test_garbage_rejected(self):
        with pytest.raises(InvalidInputError):
            parse_dimension("three inches")

    def test_length_to_dict_round_trip(self):
        for value in (inches(2), cm(1.25), pt(18), ratio(0.5), 123_456):
            assert parse_dimension(length_to_dict(value)) == value


class TestGeometry:

    def test_degrees_to_angle(self):
        assert degrees_to_angle(45) == 2_700_000
        assert degrees_to_angle(360) == 0
        assert degrees_to_angle(-90) == 16_200_000

    def test_resolve_box_against_slide(self):
        box = resolve_box(ratio(0.5), ratio(0.5), ratio(0.5), ratio(0.5), SLIDE_4X3)
        assert box.x == SLIDE_4X3.width // 2
        assert box.y == SLIDE_4X3.height // 2
        assert box.width == SLIDE_4X3.width // 2
        assert box.rotation == 0

    def test_resolve_box_rotation(self):
        box = resolve_box(0, 0, inches(1), inches(1), SLIDE_4X3, rotation=90)
        assert box.rotation == 5_400_000

    def test_resolve_box_negative_extent(self):
        with pytest.raises(InvalidInputError):
            resolve_box(0, 0, -1, 100, SLIDE_4X3)

    def test_inverse_conversions(self):
        assert emu_to_inches(SLIDE_4X3.width) == 10.0
        assert emu_to_cm(360_000) == 1.0
        assert emu_to_pt(25_400) == 2.0


class TestSlideSize:

    @pytest.mark.parametrize("name,expected", [
        ("4x3", SLIDE_4X3),
        ("16:9", SLIDE_16X9),
        ("screen16x9", SLIDE_16X9),
        ("widescreen", SLIDE_WIDESCREEN),
        ("Widescreen", SLIDE_WIDESCREEN),
    ])
    def test_from_name(self, name, expected):
        assert SlideSize.from_name(name) == expected

    def test_unknown_name(self):
        with pytest.raises(InvalidInputError):
            SlideSize.from_name("letter")

    def test_custom(self):
        size = SlideSize.custom(inches(8), inches(6))
        assert size.width == 8 * EMU_PER_INCH
        assert size.type_name is None

    def test_custom_must_be_positive(self):
        with pytest.raises(InvalidInputError):
            SlideSize.custom(0, inches(6))

    def test_from_dict_with_units(self):
        size = SlideSize.from_dict({"width": "10in", "height": "7.5in", "type": "screen4x3"})
        assert size == SLIDE_4X3


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------

class TestColor:

    def test_hex_is_normalized(self):
        assert Color.parse("#ff8800").rgb == "FF8800"

    def test_scheme_token(self):
        color = Color.parse("Accent2")
        assert color.scheme is SchemeColor.ACCENT2
        assert color.rgb is None

    def test_from_rgb(self):
        assert Color.from_rgb(255, 0, 16).rgb == "FF0010"

    def test_from_rgb_range(self):
        with pytest.raises(InvalidInputError):
            Color.from_rgb(256, 0, 0)

    def test_invalid_hex(self):
        with pytest.raises(InvalidInputError):
            Color.parse("12345")

    def test_needs_exactly_one_source(self):
        with pytest.raises(InvalidInputError):
            Color()
        with pytest.raises(InvalidInputError):
            Color(rgb="FFFFFF", scheme=SchemeColor.BG1)

    def test_to_dict(self):
        assert Color.parse("00ff00").to_dict() == "#00FF00"
        assert Color.theme("tx1").to_dict() == "tx1"

    def test_optional_color(self):
        assert optional_color(None) is None
        assert optional_color("000000") == Color(rgb="000000")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class TestErrors:

    def test_kind_and_message(self):
        exc = InvalidInputError("bad width")
        assert exc.kind is ErrorKind.INVALID_INPUT
        assert exc.message == "bad width"
        assert str(exc) == "invalid_input: bad width"

    def test_hierarchy(self):
        assert issubclass(OverlapError, PptxForgeError)
        assert issubclass(OverlapError, ValueError)
        assert PackageWriteError("x").kind is ErrorKind.IO

    def test_catch_by_base(self):
        with pytest.raises(PptxForgeError) as info:
            raise OverlapError("sections collide")
        assert info.value.kind is ErrorKind.OVERLAP
