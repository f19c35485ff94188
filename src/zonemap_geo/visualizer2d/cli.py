# cli.py
import argparse, json, logging, sys
from dataclasses import fields
from pathlib import Path

from jsonschema import ValidationError

from .config import ExportConfig, load_json
from zonemap_geo.model.errors import MissingGeographicBounds
from zonemap_geo.model.loader import ModelLoader
from zonemap_geo.landmark.builder import zones_to_landmarks
from zonemap_geo.landmark.csv_io import zones_to_csv

logger = logging.getLogger(__name__)

_SKIP_KEYS = ("config", "command")


def parse_args(argv=None):
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("map", nargs="?", help="map record JSON (persistence export)")
    common.add_argument("--config", help="JSON config; CLI options override it")
    common.add_argument("--out", help="output file (default: stdout)")
    common.add_argument("--default-icon")
    common.add_argument("--default-color")
    common.add_argument("--strict", action="store_true", default=None,
                        help="reject unknown zone types instead of treating them as points")
    common.add_argument("--skip-invalid", action="store_true", default=None,
                        help="skip malformed zones instead of failing")
    common.add_argument("--log-level")

    p = argparse.ArgumentParser(prog="zonemap-geo",
                                description="Project map zones onto geography.")
    sub = p.add_subparsers(dest="command", required=True)
    sub.add_parser("landmarks", parents=[common], help="landmark records as JSON")
    sub.add_parser("csv", parents=[common], help="landmark CSV export")
    pv = sub.add_parser("preview", parents=[common], help="plot landmarks (PNG with --out)")
    pv.add_argument("--overlay-map", action="store_true", default=None)
    pv.add_argument("--tiles")
    pv.add_argument("--zoom", type=int)
    return p.parse_args(argv)


def build_config(args) -> ExportConfig:
    cfg_dict = load_json(args.config)
    # JSONをデフォルトに、CLIで上書き
    for k, v in vars(args).items():
        if k in _SKIP_KEYS: continue
        if v is not None: cfg_dict[k] = v
    unknown = set(cfg_dict) - {f.name for f in fields(ExportConfig)}
    if unknown:
        raise ValueError(f"unknown config keys: {', '.join(sorted(unknown))}")
    return ExportConfig(**cfg_dict)


def _emit(text: str, out: str | None) -> None:
    if out:
        Path(out).write_text(text, encoding="utf-8")
        logger.info("wrote %s", out)
    else:
        print(text)


def run(command: str, cfg: ExportConfig) -> None:
    record = ModelLoader(validate_schema=True).load_map_record(cfg.map)
    opts = dict(strict=cfg.strict, skip_invalid=cfg.skip_invalid)

    if command == "csv":
        text = zones_to_csv(record.zones, record.canvas, record.bounds,
                            cfg.default_icon, cfg.default_color, **opts)
        _emit(text, cfg.out)
        return

    if command == "preview" and record.bounds is None:
        raise MissingGeographicBounds("geographic bounds are required for a preview")

    landmarks = zones_to_landmarks(record.zones, record.canvas, record.bounds,
                                   cfg.default_icon, cfg.default_color, **opts)
    if command == "landmarks":
        _emit(json.dumps([lm.to_dict() for lm in landmarks], indent=2, ensure_ascii=False), cfg.out)
        return

    from .overlay import TileOverlay
    from .renderer import LandmarkPlotter

    overlay = TileOverlay(cfg.tiles, cfg.zoom) if cfg.overlay_map else None
    plotter = LandmarkPlotter(overlay)
    fig, _ = plotter.draw(landmarks, record.bounds, title=record.title)
    if cfg.out:
        plotter.save(fig, cfg.out)
    else:
        plotter.show()


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        cfg = build_config(args)
        logging.basicConfig(level=cfg.logging_level(),
                            format="%(levelname)s %(name)s: %(message)s")
        run(args.command, cfg)
    except (ValueError, ValidationError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
