"""
Unit tests for the unit and dimension model.
"""

import pytest

from planogram_core.models.dimensions import (
    Dimensions,
    to_inches,
    to_pixels,
    units_equal,
    validate_dimensions,
)
from planogram_core.utils.error_handler import DimensionError, DimensionErrorKind


class TestPixelTransform:
    """Tests for to_pixels/to_inches."""

    def test_default_scale_is_ten_pixels_per_inch(self):
        assert to_pixels(2.0) == 20.0
        assert to_inches(20.0) == 2.0

    def test_custom_scale(self):
        assert to_pixels(3.0, 12.5) == 37.5
        assert to_inches(37.5, 12.5) == 3.0

    @pytest.mark.parametrize("value", [0.001, 0.1, 1.0, 2.5, 13.37, 48.0, 1234.5678])
    @pytest.mark.parametrize("scale", [0.5, 1.0, 3.0, 10.0, 72.0, 96.7])
    def test_round_trip_within_tolerance(self, value, scale):
        """toInches(toPixels(v, s), s) == v within 1e-6."""
        assert abs(to_inches(to_pixels(value, scale), scale) - value) <= 1e-6

    @pytest.mark.parametrize("scale", [0, -1.0])
    def test_non_positive_scale_is_rejected(self, scale):
        with pytest.raises(ValueError):
            to_pixels(1.0, scale)
        with pytest.raises(ValueError):
            to_inches(1.0, scale)

    def test_units_equal_tolerance(self):
        assert units_equal(1.0, 1.0 + 1e-9)
        assert not units_equal(1.0, 1.001)


class TestValidateDimensions:
    """Tests for validate_dimensions."""

    def test_positive_dimensions_pass(self):
        assert validate_dimensions(Dimensions(1.0, 2.0, 3.0)) is None

    @pytest.mark.parametrize("field, dims", [
        ("width", Dimensions(0.0, 2.0, 3.0)),
        ("height", Dimensions(1.0, -2.0, 3.0)),
        ("depth", Dimensions(1.0, 2.0, 0.0)),
    ])
    def test_non_positive_dimension_fails(self, field, dims):
        with pytest.raises(DimensionError) as exc_info:
            validate_dimensions(dims, component_id="c9")
        assert exc_info.value.kind == DimensionErrorKind.NON_POSITIVE
        assert exc_info.value.field == field
        assert exc_info.value.component_id == "c9"

    def test_dimensions_are_immutable_values(self):
        dims = Dimensions(1.0, 2.0, 3.0)
        assert dims == Dimensions(1.0, 2.0, 3.0)
        with pytest.raises(AttributeError):
            dims.width = 5.0

    def test_dict_round_trip(self):
        dims = Dimensions(1.5, 2.0, 3.25)
        assert Dimensions.from_dict(dims.to_dict()) == dims

    def test_pixel_size(self):
        assert Dimensions(2.0, 8.0, 3.0).pixel_size(10.0) == {'width': 20.0, 'height': 80.0}
