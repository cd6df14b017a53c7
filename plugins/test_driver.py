#!/usr/bin/env python3
"""
Test script for the frame driver, configuration and headless tooling.

Verifies:
1. FrameDriver output shapes, dtypes and listeners
2. Runtime parameter changes (LUT rebuild, tint, reversed, count clamping)
3. Preset application
4. Config clamping and validation
5. End-to-end scale values on a hand-built grid
6. Snapshot rendering and the CLI entry point
"""

import io
import logging
import os
import tempfile

import numpy as np
from pydantic import ValidationError

from focal_field.config import (DEFAULT_SATURATION, DEFAULT_TINT_NEAR,
                                DEFAULT_VALUE, AnimationSettings,
                                CurveControlPoints, FalloffSpec, FieldConfig,
                                anchors_for, enforce_gap, preset_params)
from focal_field.driver import FrameDriver
from focal_field.grid import Grid
from focal_field.lut import LutBuilder, generate_scale_lut
from focal_field.logging_config import setup_logging
from focal_field.presets import PRESET_ORDER, PRESETS, get_preset, list_presets


def test_default_frame():
    print("Testing default frame...")
    driver = FrameDriver(seed=1)
    out = driver.step(1/60)
    assert len(out) == 12 ** 3
    assert out.scales.dtype == np.float32 and out.scales.shape == (1728,)
    assert out.colors.dtype == np.float32 and out.colors.shape == (1728, 3)
    assert out.positions.shape == (1728, 3)
    assert out.frame == 0 and driver.frame == 1
    assert out.sphere_segments == 16
    assert out.opacity == 0.5
    assert np.all(np.isfinite(out.scales))
    print("  ✓ Default frame working correctly")


def test_listeners_and_latest_frame():
    print("Testing listeners...")
    driver = FrameDriver(seed=2)
    seen = []
    driver.add_listener(seen.append)
    assert driver.latest_frame is None
    a = driver.step(1/60)
    b = driver.step(1/60)
    assert seen == [a, b]
    assert driver.latest_frame is b

    driver.remove_listener(seen.append)
    driver.step(1/60)
    assert len(seen) == 2
    print("  ✓ Listeners working correctly")


def test_runtime_scale_rebuilds_lut():
    print("Testing runtime scale change...")
    driver = FrameDriver(seed=3)
    old_lut = driver.lut
    assert driver.lut_builder.rebuilds == 1

    driver.set_runtime_params(min_scale=0.5, max_scale=1.5)
    assert driver.lut is not old_lut
    assert driver.lut_builder.rebuilds == 2
    assert abs(driver.lut[0] - 1.5) < 1e-3
    assert abs(driver.lut[-1] - 0.5) < 1e-3
    # Old table untouched
    assert abs(old_lut[0] - 2.0) < 1e-2

    # Non-curve changes reuse the table
    lut = driver.lut
    driver.set_runtime_params(opacity=0.8, speed=1.0)
    assert driver.lut is lut
    assert driver.step(1/60).opacity == 0.8
    print("  ✓ LUT rebuild working correctly")


def test_unknown_parameter():
    print("Testing unknown parameter...")
    driver = FrameDriver(seed=4)
    try:
        driver.set_runtime_params(warp_factor=9)
    except KeyError:
        pass
    else:
        raise AssertionError("Expected KeyError")
    print("  ✓ Unknown parameter rejected")


def test_paused_tint_change_visible():
    """Config changes show up on refresh() even while paused."""
    print("Testing paused tint change...")
    config = FieldConfig().with_updates(enabled=False)
    driver = FrameDriver(config=config, seed=5, snap_weights=True)
    before = driver.step(1/60).colors.copy()
    assert not np.allclose(before, (1.0, 0.0, 0.0))

    driver.set_runtime_params(tint_near=(1.0, 0.0, 0.0), tint_far=(1.0, 0.0, 0.0))
    out = driver.refresh()
    assert np.allclose(out.colors, (1.0, 0.0, 0.0))
    assert out.elapsed_time == 0.0
    print("  ✓ Paused tint change visible")


def test_reversed_and_hsv():
    print("Testing reversed and HSV params...")
    driver = FrameDriver(seed=6)
    driver.set_runtime_params(reversed=True)
    assert driver.config.falloff.start_y == 0.0
    assert driver.config.falloff.end_y == 1.0

    far = driver.config.tint_far
    driver.set_runtime_params(hue=0, saturation=1, value=1)
    assert np.allclose(driver.config.tint_near, (1.0, 0.0, 0.0))
    assert driver.config.tint_far == far

    driver.set_runtime_params(far_hue=240)
    assert np.allclose(driver.config.tint_far, (0.0, 0.0, 1.0))
    print("  ✓ Reversed and HSV params working correctly")


def test_failed_update_keeps_picker_state():
    """A rejected batch must not leak its hue into later updates."""
    print("Testing picker state on failed update...")
    driver = FrameDriver(seed=14)
    near, far = driver.config.tint_near, driver.config.tint_far
    try:
        driver.set_runtime_params(hue=0.0, bogus=1)
    except KeyError:
        pass
    else:
        raise AssertionError("Expected KeyError")
    assert driver.config.tint_near == near

    # Re-applying the default saturation reproduces the default tint
    driver.set_runtime_params(saturation=DEFAULT_SATURATION)
    assert np.allclose(driver.config.tint_near, DEFAULT_TINT_NEAR)
    assert driver.config.tint_far == far
    print("  ✓ Failed update leaves picker state alone")


def test_saturation_before_hue():
    print("Testing saturation/value without a hue...")
    driver = FrameDriver(seed=15)
    far = driver.config.tint_far
    driver.set_runtime_params(saturation=0.0)
    assert np.allclose(driver.config.tint_near, (DEFAULT_VALUE,) * 3)
    assert driver.config.tint_far == far

    # Presets load their hues into the picker
    linear = FrameDriver.from_preset("linear", seed=16)
    linear.set_runtime_params(saturation=1.0, value=1.0)
    assert np.allclose(linear.config.tint_near, (1.0, 0.0, 0.0))
    assert np.allclose(linear.config.tint_far, (0.0, 0.0, 1.0))
    print("  ✓ Saturation/value apply to the current hue")


def test_center_count_clamped():
    print("Testing center_count clamping...")
    driver = FrameDriver(seed=7)
    driver.set_runtime_params(center_count=10)
    assert driver.config.animation.center_count == 3
    assert driver.animator.active_count == 3
    assert [c.weight_target for c in driver.animator.centers] == [1.0, 1.0, 1.0]
    print("  ✓ center_count clamped")


def test_transforms():
    print("Testing transforms...")
    driver = FrameDriver(seed=8)
    out = driver.step(1/60)
    m = out.transforms()
    assert m.shape == (1728, 4, 4) and m.dtype == np.float32
    assert np.allclose(m[:, 0, 0], out.scales)
    assert np.allclose(m[:, 2, 2], out.scales)
    assert np.allclose(m[:, :3, 3], out.positions)
    assert np.all(m[:, 3, 3] == 1.0)
    assert np.all(m[:, 0, 1] == 0.0)
    print("  ✓ Transforms working correctly")


def test_grid_rebuild():
    print("Testing grid rebuild...")
    driver = FrameDriver(seed=9)
    driver.set_runtime_params(grid_size=4)
    assert len(driver.grid) == 64
    assert abs(driver.animator.half_extent - 2.4) < 1e-9
    out = driver.step(1/60)
    assert len(out) == 64 and out.colors.shape == (64, 3)
    assert np.all(np.abs(out.center_positions) <= driver.animator.bound + 1e-9)
    print("  ✓ Grid rebuild working correctly")


def test_custom_grid_end_to_end():
    """Paused single center at the origin over a two-element grid."""
    print("Testing end-to-end scale...")
    grid = Grid([(0, 0, 0), (10, 0, 0)])
    assert abs(grid.max_distance() - 11.0) < 1e-9
    config = FieldConfig.from_preset("linear").with_updates(enabled=False)
    driver = FrameDriver(config=config, grid=grid, seed=10, snap_weights=True)

    out = driver.step(1/60)
    assert abs(out.scales[0] - 1.0) < 1e-3, f"Origin scale: {out.scales[0]}"
    assert out.scales[1] < out.scales[0]
    assert np.all(out.scales >= 0.1 - 1e-6) and np.all(out.scales <= 1.0 + 1e-6)
    assert len(out.center_positions) == 1

    # A custom grid survives grid_size changes
    driver.set_runtime_params(grid_size=5)
    assert driver.grid is grid
    print("  ✓ End-to-end scale working correctly")


def test_presets():
    print("Testing presets...")
    assert set(PRESET_ORDER) == set(PRESETS)
    assert get_preset("nope") is None
    assert [k for k, _, _ in list_presets("swarm")] == ["swarm", "twins"]

    for key in PRESET_ORDER:
        FieldConfig.from_preset(key)

    swarm = FrameDriver.from_preset("swarm", seed=11)
    assert swarm.config.animation.center_count == 3
    assert swarm.config.animation.randomness == 80.0

    assert swarm.apply_preset("nope") is False
    assert swarm.config.animation.center_count == 3

    swarm.set_runtime_params(preset="hollow")
    assert swarm.config.falloff.start_y == 0.0
    assert swarm.config.animation.center_count == 2

    params = preset_params(PRESETS["linear"])
    assert "group" not in params and "hues" not in params
    assert params["start_y"] == 1.0 and params["end_y"] == 0.0
    print("  ✓ Presets working correctly")


def test_config_clamping():
    print("Testing config clamping...")
    assert abs(FalloffSpec(min_scale=2.0, max_scale=1.0).max_scale - 2.001) < 1e-12
    assert FalloffSpec(min_scale=0.0).min_scale == 0.001
    assert CurveControlPoints(p1x=1.5, p2y=-0.2).p1x == 1.0
    assert CurveControlPoints(p1x=1.5, p2y=-0.2).p2y == 0.0
    assert AnimationSettings(speed=0).speed == 0.01
    assert AnimationSettings(randomness=250).randomness == 100.0
    assert AnimationSettings(bounds_scale=0.2).bounds_scale == 1.0
    assert FieldConfig(opacity=1.5).opacity == 1.0
    assert FieldConfig(tint_near=(2.0, -1.0, 0.5)).tint_near == (1.0, 0.0, 0.5)
    assert FieldConfig(grid_size=0).grid_size == 1

    # Clamping applies through with_updates too
    cfg = FieldConfig().with_updates(max_scale=0.01)
    assert cfg.falloff.max_scale > cfg.falloff.min_scale

    for bad in ({"speed": "fast"}, {"speed": None}, {"center_count": [2]}):
        try:
            AnimationSettings(**bad)
        except ValidationError:
            pass
        else:
            raise AssertionError(f"Expected ValidationError for {bad}")

    for bad in (lambda: FieldConfig().with_updates(bogus=1),
                lambda: FieldConfig.from_preset("nope")):
        try:
            bad()
        except KeyError:
            pass
        else:
            raise AssertionError("Expected KeyError")

    try:
        FieldConfig().opacity = 0.2
    except ValidationError:
        pass
    else:
        raise AssertionError("Config should be frozen")
    print("  ✓ Config clamping working correctly")


def test_scale_bounds_single_side():
    """Ordering holds when only one of min_scale/max_scale is given."""
    print("Testing one-sided scale bounds...")
    low_max = FalloffSpec(max_scale=0.01)
    assert low_max.min_scale == 0.03
    assert abs(low_max.max_scale - 0.031) < 1e-12

    high_min = FalloffSpec(min_scale=5.0)
    assert high_min.max_scale > high_min.min_scale

    # The table for a clamped spec still falls from near to far
    lut = generate_scale_lut(low_max)
    assert lut[0] > lut[-1]

    # Same through a one-key runtime update
    driver = FrameDriver(seed=13)
    driver.set_runtime_params(min_scale=4.0)
    assert driver.config.falloff.max_scale > driver.config.falloff.min_scale
    assert driver.lut[0] > driver.lut[-1]
    print("  ✓ One-sided scale bounds clamped")


def test_curve_helpers():
    print("Testing curve helpers...")
    assert anchors_for(False) == (1.0, 0.0)
    assert anchors_for(True) == (0.0, 1.0)
    assert enforce_gap(0.2, 0.8) == (0.2, 0.8)
    p1x, p2x = enforce_gap(0.5, 0.5)
    assert p2x - p1x >= 0.02 - 1e-12
    p1x, p2x = enforce_gap(0.99, 0.995)
    assert p2x == 1.0 and abs(p1x - 0.98) < 1e-12
    print("  ✓ Curve helpers working correctly")


def _reset_logger():
    logger = logging.getLogger("focal_field")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_logging_setup():
    print("Testing logging setup...")
    _reset_logger()
    logger = logging.getLogger("focal_field")
    host_handler = logging.NullHandler()
    logger.addHandler(host_handler)

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "field.log")
        console = io.StringIO()
        assert setup_logging("warning", log_file=path, stream=console) is logger
        assert len(logger.handlers) == 3
        assert logger.level == logging.DEBUG, "File log records DEBUG"

        FieldConfig(opacity=3.0)
        LutBuilder().get(FalloffSpec())
        for handler in logger.handlers:
            handler.flush()
        with open(path, encoding="utf-8") as f:
            text = f.read()
        assert "opacity=3.0 out of range" in text
        assert "Rebuilt scale LUT" in text
        assert "opacity=3.0 out of range" in console.getvalue()
        assert "Rebuilt scale LUT" not in console.getvalue(), "Console stays at WARNING"

        # Re-running replaces only its own handlers
        setup_logging(logging.INFO, stream=io.StringIO())
        assert host_handler in logger.handlers
        assert len(logger.handlers) == 2
        assert logger.level == logging.INFO
        _reset_logger()

    try:
        setup_logging("chatty")
    except ValueError:
        pass
    else:
        raise AssertionError("Expected ValueError")
    _reset_logger()
    print("  ✓ Logging setup working correctly")


def test_snapshot():
    print("Testing snapshot...")
    from focal_field.snapshot import render_snapshot, save_snapshot

    driver = FrameDriver(seed=12, snap_weights=True)
    out = driver.step(1/60)
    img = render_snapshot(out, size=64)
    assert img.size == (64, 64)
    assert img.mode == "RGBA"

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "frame.png")
        assert save_snapshot(out, path, size=32) == path
        assert os.path.getsize(path) > 0
    print("  ✓ Snapshot working correctly")


def test_cli():
    print("Testing CLI...")
    from focal_field.__main__ import main

    assert main(["--frames", "3", "--grid", "3", "linear"]) == 0
    assert main(["--list"]) == 0
    assert main(["bogus"]) == 2
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "snap.png")
        assert main(["--frames", "2", "--grid", "2", "--seed", "1",
                     "--paused", "--snap", path, "swarm"]) == 0
        assert os.path.exists(path)

        log_path = os.path.join(tmp, "run.log")
        assert main(["--frames", "2", "--grid", "2", "--log", log_path]) == 0
        _reset_logger()
        with open(log_path, encoding="utf-8") as f:
            assert "Rebuilt scale LUT" in f.read()
    print("  ✓ CLI working correctly")


def test_module_entry_point():
    """`python -m focal_field` resolves to the CLI."""
    print("Testing module entry point...")
    import runpy
    import sys

    argv = sys.argv
    sys.argv = ["focal_field", "--list"]
    try:
        runpy.run_module("focal_field", run_name="__main__")
    except SystemExit as exc:
        assert exc.code == 0, f"Exit code: {exc.code}"
    else:
        raise AssertionError("Expected SystemExit from the CLI")
    finally:
        sys.argv = argv
    print("  ✓ Module entry point working correctly")


if __name__ == "__main__":
    print("\n=== Testing Frame Driver ===\n")

    test_default_frame()
    test_listeners_and_latest_frame()
    test_runtime_scale_rebuilds_lut()
    test_unknown_parameter()
    test_paused_tint_change_visible()
    test_reversed_and_hsv()
    test_failed_update_keeps_picker_state()
    test_saturation_before_hue()
    test_center_count_clamped()
    test_transforms()
    test_grid_rebuild()
    test_custom_grid_end_to_end()
    test_presets()
    test_config_clamping()
    test_scale_bounds_single_side()
    test_curve_helpers()
    test_logging_setup()
    test_snapshot()
    test_cli()
    test_module_entry_point()

    print("\n✓ All tests passed!\n")
