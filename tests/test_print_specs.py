"""Tests for trim sizes, layout metrics and margins."""

import pytest

from visionpress.core.print_specs import (
    BindingType, LayoutMeta, TrimSize, content_margins, mm_to_px, page_limits, px_to_mm,
    resolve_layout, safe_area,
)


def test_mm_to_px_at_300_dpi():
    assert mm_to_px(10) == 118
    assert mm_to_px(25.4) == 300
    assert mm_to_px(25.4, dpi=72) == 72


def test_px_to_mm_inverts_mm_to_px():
    assert px_to_mm(300) == pytest.approx(25.4)


def test_trade_trim_pixel_size():
    layout = resolve_layout(TrimSize.TRADE_6x9, BindingType.SOFTCOVER)
    assert (layout.width_px, layout.height_px) == (1800, 2700)
    assert layout.safe_margin_px == 118
    assert layout.spiral_edge_margin_px is None
    assert not layout.is_spiral


@pytest.mark.parametrize("trim,expected", [
    (TrimSize.LETTER_8_5x11, (2550, 3300)),
    (TrimSize.A5_5_83x8_27, (1748, 2480)),
    (TrimSize.CARD_3x5, (900, 1500)),
])
def test_trim_sizes_at_reference_dpi(trim, expected):
    assert (trim.width_px, trim.height_px) == expected


def test_spiral_binding_adds_edge_margin():
    layout = resolve_layout(TrimSize.A5_5_83x8_27, BindingType.SPIRAL)
    assert layout.is_spiral
    assert layout.spiral_edge_margin_px == mm_to_px(12)


def test_resolve_layout_is_idempotent():
    first = resolve_layout(TrimSize.EXECUTIVE_7x9, BindingType.HARDCOVER, 300)
    second = resolve_layout(TrimSize.EXECUTIVE_7x9, BindingType.HARDCOVER, 300)
    assert first == second


def test_resolve_layout_accepts_names():
    layout = resolve_layout(TrimSize.parse("TRADE_6x9"), BindingType.parse("softcover"))
    assert layout.trim_size is TrimSize.TRADE_6x9
    assert layout.binding_type is BindingType.SOFTCOVER


def test_resolve_layout_rejects_bad_dpi():
    with pytest.raises(ValueError):
        resolve_layout(TrimSize.TRADE_6x9, BindingType.SOFTCOVER, 0)


def test_unknown_trim_size_is_rejected():
    with pytest.raises(ValueError, match="Unknown trim size"):
        TrimSize.parse("POSTCARD")


def test_page_size_points_match_trim():
    layout = resolve_layout(TrimSize.TRADE_6x9, BindingType.SOFTCOVER)
    assert layout.page_size_points == pytest.approx((432.0, 648.0))


def test_layout_meta_round_trip():
    layout = resolve_layout(TrimSize.A5_5_83x8_27, BindingType.SPIRAL, 150)
    assert LayoutMeta.from_dict(layout.to_dict()) == layout


class TestSpiralMargins:
    def setup_method(self):
        self.layout = resolve_layout(TrimSize.A5_5_83x8_27, BindingType.SPIRAL)
        self.safe = self.layout.safe_margin_px
        self.spiral = self.layout.spiral_edge_margin_px

    def test_recto_pages_are_bound_on_the_left(self):
        margins = content_margins(self.layout, 1)
        assert margins.left == self.safe + self.spiral
        assert margins.right == self.safe

    def test_verso_pages_are_bound_on_the_right(self):
        margins = content_margins(self.layout, 2)
        assert margins.left == self.safe
        assert margins.right == self.safe + self.spiral

    def test_non_spiral_margins_are_symmetric(self):
        layout = resolve_layout(TrimSize.A5_5_83x8_27, BindingType.SOFTCOVER)
        for number in (1, 2):
            margins = content_margins(layout, number)
            assert margins.left == margins.right == layout.safe_margin_px

    def test_safe_area_is_inside_page(self):
        x, y, w, h = safe_area(self.layout, 1)
        assert x > 0 and y > 0
        assert x + w < self.layout.width_px
        assert y + h < self.layout.height_px


def test_page_limits_per_binding():
    assert (page_limits(BindingType.SOFTCOVER).minimum, page_limits(BindingType.SOFTCOVER).maximum) == (20, 300)
    assert page_limits(BindingType.HARDCOVER).minimum == 24
    assert page_limits(BindingType.SPIRAL) == page_limits(BindingType.SOFTCOVER)
