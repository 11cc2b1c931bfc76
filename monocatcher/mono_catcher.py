from __future__ import annotations

"""python -m monocatcher
  --folder "C:/Samples/Drums" --recursive
  --out_dir "C:/Samples/Drums_mono"
  --workers 4
  --report "C:/Samples/monocatcher_log.json"
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from .audio_engine import FileProcessor, MonoCatcherConfig
from .batch_runner import BatchOutcome, BatchRunner
from .metrics_logger import BatchReportLogger
from .system_utils import ConfigManager, apply_overrides

LOG = logging.getLogger(__name__)


def _setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure console + optional file logging."""
    lvl = getattr(logging, str(level).upper(), logging.INFO)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s | %(levelname)s | %(message)s",
        handlers=handlers,
        force=True,
    )


def split_selection(selection: str) -> list[str]:
    """Split a '|' separated file selection, as returned by multi-select file dialogs."""
    return [part for part in selection.split("|") if part.strip()]


def find_audio_files(folder: Path, recursive: bool, extensions: tuple[str, ...]) -> list[Path]:
    """
    Returns a sorted list of audio files inside folder.

    If recursive=True, searches subfolders too.
    """
    exts = {e.lower() for e in extensions}
    candidates = folder.rglob("*") if recursive else folder.glob("*")
    return sorted(p for p in candidates if p.is_file() and p.suffix.lower() in exts)


def build_cli() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mono Catcher: rewrite fake stereo WAV files as true mono.")
    parser.add_argument("files", nargs="*", help="Input WAV/AIFF files.")
    parser.add_argument("--files", dest="selection", help="'|' separated list of input files.")
    parser.add_argument("--folder", help="Folder to scan for WAV/AIFF files.")
    parser.add_argument("--recursive", action="store_true", help="Search subfolders of --folder too.")
    parser.add_argument("--out_dir", help="Destination folder for processed files.")
    parser.add_argument("--mkdir", action="store_true", help="Create --out_dir if it does not exist.")
    parser.add_argument("--workers", type=int, default=None, help="Files processed in parallel (default 1).")
    parser.add_argument("--epsilon", type=float, default=None, help="Max L/R sample difference treated as equal.")
    parser.add_argument("--preset", default=None, help="Tolerance preset name.")
    parser.add_argument("--presets", default=None, help="JSON file with extra tolerance presets.")
    parser.add_argument("--list_presets", action="store_true", help="Print preset names and exit.")
    parser.add_argument("--save_preset", default=None, help="Store the resolved tolerance under this name in --presets and exit.")
    parser.add_argument("--config", default=None, help="JSON file with config overrides.")
    parser.add_argument("--dry_run", action="store_true", help="Classify only, write nothing.")
    parser.add_argument("--report", default=None, help="Append a JSON run report to this file.")
    parser.add_argument("--no_progress", action="store_true", help="Disable the progress bar.")
    parser.add_argument("--log_level", default="INFO", help="Logging level (DEBUG/INFO/WARNING/ERROR).")
    parser.add_argument("--log_file", default=None, help="Optional log file path.")
    return parser


def build_config(args: argparse.Namespace) -> MonoCatcherConfig:
    config = MonoCatcherConfig()
    manager = ConfigManager(config_path=args.config, presets_path=args.presets)
    try:
        if args.preset:
            apply_overrides(config, manager.get_preset(args.preset))
        apply_overrides(config, manager.load_config())
    except (FileNotFoundError, ValueError) as exc:
        raise SystemExit(f"ERROR: {exc}") from exc
    if args.epsilon is not None:
        config.epsilon = args.epsilon
    if args.workers is not None:
        config.workers = args.workers
    if args.dry_run:
        config.dry_run = True
    if config.epsilon <= 0.0:
        raise SystemExit(f"ERROR: epsilon must be positive, got {config.epsilon}")
    config.audio_extensions = tuple(config.audio_extensions)
    return config


def collect_inputs(args: argparse.Namespace, config: MonoCatcherConfig) -> list[str]:
    inputs = list(args.files)
    if args.selection:
        inputs.extend(split_selection(args.selection))
    if args.folder:
        folder = Path(args.folder).expanduser()
        if not folder.is_dir():
            raise SystemExit(f"ERROR: Folder not found: {folder}")
        inputs.extend(str(p) for p in find_audio_files(folder, args.recursive, config.audio_extensions))
    return inputs


def print_outcome(outcome: BatchOutcome) -> None:
    print("\n=== Batch Summary ===")
    for item in outcome.outcomes:
        target = f" -> {item.destination}" if item.destination else ""
        print(f"{item.status:<32} {item.source_path}{target}")
    print(f"Total: {len(outcome.outcomes)}")
    print(outcome.summary())
    if outcome.failures:
        print("\nFailed files:")
        for item in outcome.failures:
            print(f"- {item.source_path}: {item.message}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_cli().parse_args(argv)
    _setup_logging(args.log_level, args.log_file)

    if args.list_presets:
        manager = ConfigManager(presets_path=args.presets)
        for name in manager.list_presets():
            print(name)
        return 0

    config = build_config(args)
    if args.save_preset:
        if not args.presets:
            print("ERROR: --save_preset requires --presets.")
            return 2
        manager = ConfigManager(presets_path=args.presets)
        presets = manager.load_presets()
        presets[args.save_preset] = {"epsilon": config.epsilon}
        manager.save_presets(presets)
        print(f"Saved preset {args.save_preset!r} to {args.presets}")
        return 0
    if not args.out_dir:
        print("ERROR: --out_dir is required.")
        return 2

    inputs = collect_inputs(args, config)
    if not inputs:
        print("No input files given.")
        return 2
    LOG.info("Found %d input files.", len(inputs))

    out_dir = Path(args.out_dir).expanduser()
    if not out_dir.is_dir():
        if not args.mkdir:
            print(f"ERROR: Output folder not found: {out_dir}")
            return 2
        out_dir.mkdir(parents=True, exist_ok=True)

    pbar = None if args.no_progress else tqdm(total=len(inputs), desc="Mono Catcher", unit="file")

    def _progress(done, total, item):
        if pbar is not None:
            pbar.update(1)
            pbar.set_postfix_str(item.status)

    runner = BatchRunner(FileProcessor(config), workers=config.workers, on_progress=_progress)
    try:
        outcome = runner.run_all(inputs, str(out_dir))
    finally:
        if pbar is not None:
            pbar.close()

    print_outcome(outcome)
    if args.report:
        BatchReportLogger(args.report).record(outcome, str(out_dir), name=out_dir.name)
    return 1 if outcome.failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
