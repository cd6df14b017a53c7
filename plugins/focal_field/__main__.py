"""
Focal Field - Headless Runner

Usage:
    python -m focal_field [preset] [--grid N] [--frames N] [--dt S]
                          [--seed N] [--snap PATH] [--paused] [--verbose]
                          [--log PATH]

Examples:
    python -m focal_field
    python -m focal_field swarm --frames 600
    python -m focal_field hollow --grid 16 --snap hollow.png

Runs the focal field for N frames at a fixed time step and prints scale
statistics every second of simulated time. --snap writes a PNG preview of
the last frame. --log writes a DEBUG-level log file.

Use --list to see all available presets.
"""

import logging
import sys

from .config import FieldConfig
from .driver import FrameDriver
from .logging_config import setup_logging
from .presets import GROUP_ORDER, PRESET_ORDER, list_presets


def run(preset, grid_size=None, frames=300, dt=1.0 / 60, seed=None,
        snap_path=None, paused=False):
    """Run the driver headless. Returns the last FrameOutput."""
    config = FieldConfig.from_preset(preset)
    if grid_size is not None:
        config = config.with_updates(grid_size=grid_size)
    if paused:
        config = config.with_updates(enabled=False)

    driver = FrameDriver(config=config, seed=seed)
    report_every = max(1, int(round(1.0 / dt)))

    out = None
    for i in range(frames):
        out = driver.step(dt)
        if i % report_every == report_every - 1 or i == frames - 1:
            s = out.stats
            print(f"  frame {s['frame']:5d}  t={s['time']:7.2f}  "
                  f"scale mean={s['scale_mean']:.3f} "
                  f"min={s['scale_min']:.3f} max={s['scale_max']:.3f}  "
                  f"centers={s['centers']}")

    if snap_path and out is not None:
        from .snapshot import save_snapshot
        save_snapshot(out, snap_path)
        print(f"  saved: {snap_path}")
    return out


def main(argv=None):
    preset = "classic"
    grid_size = None
    frames = 300
    dt = 1.0 / 60
    seed = None
    snap_path = None
    paused = False
    level = logging.WARNING
    log_file = None

    args = sys.argv[1:] if argv is None else list(argv)
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--grid" and i + 1 < len(args):
            grid_size = int(args[i + 1])
            i += 2
        elif arg == "--frames" and i + 1 < len(args):
            frames = int(args[i + 1])
            i += 2
        elif arg == "--dt" and i + 1 < len(args):
            dt = float(args[i + 1])
            i += 2
        elif arg == "--seed" and i + 1 < len(args):
            seed = int(args[i + 1])
            i += 2
        elif arg == "--snap" and i + 1 < len(args):
            snap_path = args[i + 1]
            i += 2
        elif arg == "--log" and i + 1 < len(args):
            log_file = args[i + 1]
            i += 2
        elif arg == "--paused":
            paused = True
            i += 1
        elif arg == "--verbose":
            level = logging.DEBUG
            i += 1
        elif arg == "--list":
            print("\nAvailable presets:")
            for group in GROUP_ORDER:
                print(f"\n  [{group}]")
                for key, name, desc in list_presets(group):
                    print(f"    {key:12s} {name:12s} {desc}")
            print()
            return 0
        elif arg in ("--help", "-h"):
            print(__doc__)
            return 0
        elif arg in PRESET_ORDER:
            preset = arg
            i += 1
        else:
            print(f"Unknown argument: {arg}")
            print("Use --list to see available presets")
            return 2

    setup_logging(level, log_file=log_file)

    print("Focal field")
    print(f"  Preset: {preset}")
    print(f"  Frames: {frames} @ dt={dt:.4f}")
    print()
    run(preset, grid_size=grid_size, frames=frames, dt=dt, seed=seed,
        snap_path=snap_path, paused=paused)
    return 0


if __name__ == "__main__":
    sys.exit(main())
