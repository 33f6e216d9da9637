"""
Command line entry point.

    python -m qglobe [--startup-log-dir DIR] replay events.json [--width 960 --height 500]

Replays a recorded pointer script through the drag controller and prints the
final orientation and marker layout as JSON. The script is an object:

    {
      "viewport": {"width": 960, "height": 500},
      "events": [{"type": "zoom", "k": 2, "x": -480, "y": -250},
                 {"type": "down", "x": 480, "y": 250},
                 {"type": "move", "x": 520, "y": 250},
                 {"type": "up"}],
      "markers": [{"uid": "paris", "lat": 48.85, "long": 2.35, "value": "Paris"}]
    }

A zoom event sets the zoom/pan transform (screen point p is shown at
k * p + (x, y)); k is limited to the configured zoom extent.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from qglobe.app.app_settings_manager import AppSettingsManager, ViewConfig
from qglobe.app.logging_setup import (
    LogSystem,
    apply_logging_policy,
    install_qt_message_handler,
    setup_startup_logging,
)
from qglobe.utils.json_loader import SettingsError, read_json_dict
from qglobe.viewers.controllers.drag_controller import DragController
from qglobe.viewers.markers import GeoDatum, layout_markers
from qglobe.viewers.projection import ProjectionParameters, ZoomTransform

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 960
DEFAULT_HEIGHT = 500


def replay(script: dict[str, Any], view: ViewConfig,
           width: float | None = None, height: float | None = None) -> dict[str, Any]:
    """
    Run a pointer script and return the resulting orientation and markers.

    :raises ValueError: for unknown event types or malformed markers
    :raises InvalidPointerError: for non-finite pointer coordinates
    """
    viewport = script.get("viewport", {})
    width = width or viewport.get("width", DEFAULT_WIDTH)
    height = height or viewport.get("height", DEFAULT_HEIGHT)

    controller = DragController(
        ProjectionParameters.for_viewport(float(width), float(height),
                                          scale=view.scale, clip_angle=view.clip_angle),
        scale_extent=view.scale_extent,
    )

    for index, event in enumerate(script.get("events", [])):
        kind = event.get("type")
        if kind == "down":
            controller.pointer_down(float(event["x"]), float(event["y"]))
        elif kind == "move":
            controller.pointer_move(float(event["x"]), float(event["y"]))
        elif kind == "up":
            controller.pointer_up()
        elif kind == "cancel":
            controller.cancel()
        elif kind == "zoom":
            controller.apply_zoom(ZoomTransform(
                float(event.get("k", 1.0)), float(event.get("x", 0.0)), float(event.get("y", 0.0))))
        else:
            raise ValueError(f"Unknown event type at index {index}: {kind!r}")

    markers = [GeoDatum.from_dict(m) for m in script.get("markers", [])]
    placements = layout_markers(
        markers, controller.projection,
        marker_horizon_deg=view.marker_horizon_deg,
        label_horizon_deg=view.label_horizon_deg,
    )
    return {
        "orientation": asdict(controller.orientation.current),
        "markers": [asdict(p) for p in placements],
    }


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qglobe", description="Globe drag-rotation tools")
    parser.add_argument("--startup-log-dir", type=Path, default=None,
                        help="Write startup diagnostics and crash traces to this directory")
    sub = parser.add_subparsers(dest="command", required=True)
    p_replay = sub.add_parser("replay", help="Replay a pointer event script")
    p_replay.add_argument("script", type=Path, help="JSON pointer script")
    p_replay.add_argument("--width", type=float, default=None, help="Viewport width")
    p_replay.add_argument("--height", type=float, default=None, help="Viewport height")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    if args.startup_log_dir is not None:
        # Must run before the queue-based LogSystem replaces the root handlers.
        setup_startup_logging("qglobe", level_console=logging.WARNING, log_dir=args.startup_log_dir)
    logs = LogSystem("qglobe")
    try:
        install_qt_message_handler()
        settings_mgr = AppSettingsManager()
        apply_logging_policy(logs, settings_mgr)

        try:
            script = read_json_dict(args.script, logger=logger)
            result = replay(script, settings_mgr.view, args.width, args.height)
        except (SettingsError, ValueError, KeyError) as e:
            logger.error("Replay failed: %s", e)
            return 1

        json.dump(result, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0
    finally:
        logs.stop()


if __name__ == "__main__":
    sys.exit(main())
