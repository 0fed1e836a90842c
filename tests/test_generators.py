"""Tests for pixel generators and image rendering."""

import random

import numpy as np
import pytest
from PIL import Image

from random_art.ast_nodes import BinaryOp, Opcode, UnaryOp, Value, Variable, random_trees
from random_art.generators import (
    GrayscaleGenerator,
    RgbGenerator,
    create_coordinate_grids,
    generate_image,
    make_generator,
    render_image,
    save_image,
    to_channel,
    to_channel_array,
)


class TestChannelMapping:
    """Test rescaling of evaluations into channel bytes."""

    def test_boundaries(self):
        assert to_channel(1.0) == 255
        assert to_channel(-1.0) == 0

    def test_midpoint_rounds_half_to_even(self):
        # 0.0 -> 127.5 -> 128
        assert to_channel(0.0) == 128

    def test_out_of_range_is_clamped(self):
        assert to_channel(3.5) == 255
        assert to_channel(-12.0) == 0

    def test_non_finite(self):
        assert to_channel(float("inf")) == 255
        assert to_channel(float("-inf")) == 0
        assert to_channel(float("nan")) == 0

    def test_array_form(self):
        out = to_channel_array(np.array([-1.0, 0.0, 1.0, 2.0, np.nan]))
        assert out.dtype == np.uint8
        assert out.tolist() == [0, 128, 255, 255, 0]


class TestCoordinates:
    """Test normalized coordinate grids."""

    def test_centered_grid(self):
        X, Y = create_coordinate_grids(4, 2)
        assert X.shape == (2, 4)
        assert X[0].tolist() == [-0.5, -0.25, 0.0, 0.25]
        assert Y[:, 0].tolist() == [-0.5, 0.0]

    def test_odd_size_uses_integer_midpoint(self):
        X, _ = create_coordinate_grids(5, 1)
        assert X[0].tolist() == [-0.4, -0.2, 0.0, 0.2, 0.4]


class TestGenerators:
    """Test grayscale and RGB pixel generators."""

    def test_grayscale_color(self):
        gen = GrayscaleGenerator(0, intensity=Variable(Value.X))
        assert gen.mode == "L"
        assert gen.generate_color(-0.5, 0.0) == 64
        assert gen.generate_color(0.0, 0.9) == 128

    def test_rgb_color(self):
        trees = (
            Variable(Value.X),
            Variable(Value.Y),
            UnaryOp(Opcode.SCALED_SIGMOID, Variable(Value.X)),
        )
        gen = RgbGenerator(0, trees=trees)
        assert gen.mode == "RGB"
        assert gen.generate_color(0.5, -0.5) == (191, 64, 159)

    def test_rgb_requires_three_trees(self):
        with pytest.raises(ValueError):
            RgbGenerator(0, trees=(Variable(Value.X),))

    def test_rgb_trees_are_independent_draws(self):
        gen = RgbGenerator(6, random.Random(11))
        expected = random_trees(3, 6, random.Random(11))
        assert gen.formulas() == [str(t) for t in expected]

    def test_make_generator(self):
        assert isinstance(make_generator(False, 3, random.Random(0)), GrayscaleGenerator)
        assert isinstance(make_generator(True, 3, random.Random(0)), RgbGenerator)

    def test_trees_respect_depth(self):
        gen = RgbGenerator(5, random.Random(2))
        for tree in gen.trees:
            assert tree.get_depth() <= 5


class TestRendering:
    """Test image filling and vectorized rendering."""

    def test_render_size_and_mode(self):
        gray = render_image(GrayscaleGenerator(6, random.Random(1)), size=(12, 7))
        color = render_image(RgbGenerator(6, random.Random(1)), size=(12, 7))

        assert gray.size == (12, 7)
        assert gray.mode == "L"
        assert color.size == (12, 7)
        assert color.mode == "RGB"

    def test_per_pixel_matches_vectorized(self):
        tree = BinaryOp(Opcode.AVERAGE, Variable(Value.X), Variable(Value.Y))
        gen = GrayscaleGenerator(0, intensity=tree)

        filled = generate_image(Image.new("L", (9, 6)), gen)
        rendered = render_image(gen, size=(9, 6))
        assert np.array_equal(np.asarray(filled), np.asarray(rendered))

    def test_pixel_position(self):
        gen = GrayscaleGenerator(0, intensity=Variable(Value.X))
        image = generate_image(Image.new("L", (4, 4)), gen)
        # column 0 -> x = -0.5
        assert image.getpixel((0, 3)) == 64
        assert image.getpixel((2, 0)) == 128

    def test_threaded_fill_matches_serial(self):
        gen = RgbGenerator(8, random.Random(21))
        serial = generate_image(Image.new("RGB", (16, 13)), gen)
        threaded = generate_image(Image.new("RGB", (16, 13)), gen, workers=4)
        assert np.array_equal(np.asarray(serial), np.asarray(threaded))

    def test_threaded_render_matches_serial(self):
        gen = GrayscaleGenerator(8, random.Random(8))
        serial = np.asarray(render_image(gen, size=(20, 15))).astype(int)
        threaded = np.asarray(render_image(gen, size=(20, 15), workers=3)).astype(int)
        assert serial.shape == threaded.shape
        assert np.abs(serial - threaded).max() <= 1

    def test_mode_mismatch(self):
        gen = GrayscaleGenerator(3, random.Random(0))
        with pytest.raises(ValueError):
            generate_image(Image.new("RGB", (4, 4)), gen)

    def test_invalid_arguments(self):
        gen = GrayscaleGenerator(3, random.Random(0))
        with pytest.raises(ValueError):
            render_image(gen, size=(0, 10))
        with pytest.raises(ValueError):
            render_image(gen, size=(10, 10), workers=0)
        with pytest.raises(ValueError):
            generate_image(Image.new("L", (4, 4)), gen, workers=0)

    def test_same_seed_same_image(self):
        a = render_image(RgbGenerator(7, random.Random(3)), size=(10, 10))
        b = render_image(RgbGenerator(7, random.Random(3)), size=(10, 10))
        assert np.array_equal(np.asarray(a), np.asarray(b))


class TestSaving:
    """Test image output."""

    def test_save_png(self, tmp_path):
        path = tmp_path / "art.png"
        image = render_image(GrayscaleGenerator(4, random.Random(0)), size=(8, 8))
        save_image(image, path)

        with Image.open(path) as loaded:
            assert loaded.size == (8, 8)

    def test_save_to_missing_directory_fails(self, tmp_path):
        image = render_image(GrayscaleGenerator(4, random.Random(0)), size=(8, 8))
        with pytest.raises(OSError):
            save_image(image, tmp_path / "missing" / "art.png")
