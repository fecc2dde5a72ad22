"""Tests for bounding box and angle computation."""

import pytest
from label_engine.models.schemas import OcrWord
from label_engine.services.geometry import normalized_bounding_box, text_angle, to_pixel_rect


def word_with_baseline(start, end, text="WORD"):
    """Word whose first two vertices run from start to end."""
    return OcrWord(text=text, polygon=(start, end, end, start), confidence=0.9)


def box_word(x, y, width=40, height=10, text="WORD"):
    """Horizontal word occupying the given pixel rectangle."""
    return OcrWord(
        text=text,
        polygon=((x, y), (x + width, y), (x + width, y + height), (x, y + height)),
        confidence=0.9,
    )


class TestTextAngle:
    """Test reading angle inference."""

    def test_horizontal(self):
        """Test left-to-right text."""
        assert text_angle([word_with_baseline((10, 20), (50, 20))]) == 0

    def test_reading_downward(self):
        """Test text rotated clockwise."""
        assert text_angle([word_with_baseline((10, 10), (10, 50))]) == 90

    def test_reading_upward(self):
        """Test text rotated counter-clockwise."""
        assert text_angle([word_with_baseline((10, 50), (10, 10))]) == -90

    def test_upside_down(self):
        """Test text rotated half a turn."""
        assert text_angle([word_with_baseline((50, 20), (10, 20))]) == 180

    def test_zero_vector(self):
        """Test degenerate baselines."""
        assert text_angle([word_with_baseline((10, 10), (10, 10))]) == 0

    def test_no_words(self):
        """Test empty input."""
        assert text_angle([]) == 0

    def test_half_way_rounds_up(self):
        """Test 45 degree baselines snap toward the positive multiple."""
        assert text_angle([word_with_baseline((0, 0), (10, 10))]) == 90
        assert text_angle([word_with_baseline((0, 0), (10, -10))]) == 0

    def test_diagonal_back_quadrants(self):
        """Test 135 and -135 degree baselines."""
        assert text_angle([word_with_baseline((10, 0), (0, 10))]) == 180
        assert text_angle([word_with_baseline((10, 10), (0, 0))]) == -90

    def test_dominant_direction_wins(self):
        """Test that the summed baseline decides."""
        words = [
            word_with_baseline((0, 0), (100, 0)),
            word_with_baseline((0, 0), (100, 0)),
            word_with_baseline((0, 0), (0, 30)),
        ]
        assert text_angle(words) == 0

    def test_result_always_in_range(self):
        """Test that every direction maps to an allowed angle."""
        for dx, dy in [(1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1), (-1, -0.01)]:
            angle = text_angle([word_with_baseline((0, 0), (dx, dy))])
            assert angle in {0, 90, -90, 180}

    def test_short_polygon_skipped(self):
        """Test that words without a baseline are ignored."""
        words = [OcrWord(text="X", polygon=((5, 5),)), word_with_baseline((10, 10), (10, 50))]
        assert text_angle(words) == 90


class TestNormalizedBoundingBox:
    """Test normalized bounding box computation."""

    def test_single_word(self):
        """Test box of one word."""
        box = normalized_bounding_box([box_word(100, 200, 200, 50)], 1000, 500)

        assert box.x == pytest.approx(0.1)
        assert box.y == pytest.approx(0.4)
        assert box.width == pytest.approx(0.2)
        assert box.height == pytest.approx(0.1)
        assert box.angle == 0

    def test_union_of_words(self):
        """Test that the box encloses every word."""
        words = [box_word(100, 100, 50, 20), box_word(300, 140, 100, 20)]
        box = normalized_bounding_box(words, 1000, 1000)

        assert box.x == pytest.approx(0.1)
        assert box.y == pytest.approx(0.1)
        assert box.width == pytest.approx(0.3)
        assert box.height == pytest.approx(0.06)

    def test_empty_words(self):
        """Test that no words gives no box."""
        assert normalized_bounding_box([], 1000, 1000) is None

    def test_zero_dimension(self):
        """Test divide-by-zero guard."""
        assert normalized_bounding_box([box_word(10, 10)], 0, 1000) is None
        assert normalized_bounding_box([box_word(10, 10)], 1000, 0) is None

    def test_overhanging_polygon_clamped(self):
        """Test that coordinates outside the image stay in range."""
        box = normalized_bounding_box([box_word(-20, 990, 60, 30)], 1000, 1000)

        assert box.x == 0
        assert box.y + box.height == pytest.approx(1.0)
        assert 0 <= box.width <= 1

    def test_rotated_text_angle(self):
        """Test that the angle is carried on the box."""
        words = [OcrWord(text="SIDE", polygon=((500, 100), (500, 300), (470, 300), (470, 100)))]
        box = normalized_bounding_box(words, 1000, 1000)
        assert box.angle == 90

    def test_round_trip(self):
        """Test that scaling back reproduces the pixel rectangle."""
        words = [box_word(123, 456, 78, 19), box_word(150, 480, 200, 25)]
        box = normalized_bounding_box(words, 1024, 768)

        x, y, width, height = to_pixel_rect(box, 1024, 768)
        assert x == pytest.approx(123)
        assert y == pytest.approx(456)
        assert width == pytest.approx(350 - 123)
        assert height == pytest.approx(505 - 456)
