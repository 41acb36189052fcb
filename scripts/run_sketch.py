import argparse
import json
import logging
import shutil
from datetime import datetime
from pathlib import Path

from sketchlayout import (
    DeviceClass,
    LayoutConfig,
    SketchConfig,
    SketchResult,
    run_pipeline,
)


def make_run_dir(name: str | None = None) -> Path:
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    run_name = f"run_{stamp}" if not name else f"run_{stamp}_{name}"
    run_dir = Path("runs") / run_name
    for sub in ["inputs", "artifacts", "exports", "logs"]:
        (run_dir / sub).mkdir(parents=True, exist_ok=True)
    return run_dir


def summarize(res: SketchResult) -> None:
    print(f"Components: {len(res.components)}")
    print(f"Groups: {len(res.groups)}")
    for g in res.groups:
        x0, y0, x1, y1 = g.bounding_rect.bbox()
        print(
            f"{g.id}: {g.type.value} {g.direction.value}/{g.alignment.value} "
            f"spacing={g.spacing:.0f} members={len(g.components)} "
            f"bbox=({x0:.0f},{y0:.0f},{x1:.0f},{y1:.0f})"
        )
    for name, sr in res.stages.items():
        line = f"  [{sr.status:>7}] {name} {sr.duration_ms}ms"
        if sr.skip_reason:
            line += f" ({sr.skip_reason})"
        print(line)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Interpret a hand-drawn UI sketch into layout groups, CSS and a description"
    )
    parser.add_argument("image", type=Path, help="Path to the sketch image")
    parser.add_argument(
        "--canvas",
        type=float,
        nargs=2,
        metavar=("WIDTH", "HEIGHT"),
        default=None,
        help="Output canvas size in pixels (defaults to the image size)",
    )
    parser.add_argument(
        "--device",
        choices=[d.value for d in DeviceClass],
        default=DeviceClass.stylus.value,
        help="Input device class; 'precise' applies the stricter minimum size",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Use the lenient shape-detector preset instead of high precision",
    )
    parser.add_argument(
        "--no-auto-layout",
        action="store_true",
        help="Emit one standalone group per component",
    )
    parser.add_argument(
        "--no-text", action="store_true", help="Skip handwritten-annotation OCR"
    )
    parser.add_argument(
        "--run-name", type=str, default=None, help="Optional suffix for the run folder"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    run_dir = make_run_dir(args.run_name)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(run_dir / "logs" / "run.log", encoding="utf-8"),
        ],
    )

    # Copy the sketch into run inputs for provenance.
    copied = run_dir / "inputs" / args.image.name
    shutil.copy2(args.image, copied)
    stem = args.image.stem.replace(" ", "_")

    cfg = SketchConfig(enable_text_detection=not args.no_text)
    layout_config = LayoutConfig.disabled() if args.no_auto_layout else LayoutConfig.default()
    res = run_pipeline(
        args.image,
        tuple(args.canvas) if args.canvas else None,
        layout_config=layout_config,
        cfg=cfg,
        device_class=DeviceClass(args.device),
        high_precision=not args.lenient,
    )

    result_path = run_dir / "artifacts" / f"{stem}_layout.json"
    result_path.write_text(json.dumps(res.to_dict(), indent=2))
    css_path = run_dir / "exports" / f"{stem}_layout.css"
    css_path.write_text(res.stylesheet)
    desc_path = run_dir / "exports" / f"{stem}_layout.txt"
    desc_path.write_text(res.description + "\n\n" + res.component_description + "\n")

    manifest = {
        "run_id": run_dir.name,
        "created_at": datetime.now().isoformat(),
        "image_original": str(args.image),
        "image_copied": str(copied),
        "canvas_width": res.canvas_width,
        "canvas_height": res.canvas_height,
        "device_class": args.device,
        "high_precision": not args.lenient,
        "fingerprint": res.fingerprint,
        "settings": vars(cfg),
        "layout_settings": vars(layout_config),
        "summary": res.to_summary_dict(),
        "artifacts": {
            "layout_json": str(result_path),
            "stylesheet_css": str(css_path),
            "description_txt": str(desc_path),
        },
    }
    (run_dir / "manifest.json").write_text(json.dumps(manifest, indent=2))

    print(f"Run folder: {run_dir}")
    print(f"Layout JSON: {result_path}")
    print(f"Stylesheet: {css_path}")
    summarize(res)


if __name__ == "__main__":
    main()
