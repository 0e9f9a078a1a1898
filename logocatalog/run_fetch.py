from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from dataclasses import replace
from pathlib import Path

from logocatalog.cycle import run_loop
from logocatalog.settings import get_settings


def _configure_logging(log_file: str | None, verbose: bool = False) -> None:
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch store logos from the brand CDN and grow the store catalog.")
    parser.add_argument("--config", default=None, help="Path to the JSON/YAML side file holding outputPath")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--max-cycles", type=_non_negative_int, default=None, help="Stop after this many cycles (default: run until interrupted)")
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = get_settings()
    if args.config:
        settings = replace(settings, config_path=Path(args.config).expanduser())

    log_file = args.log_file
    if log_file and not Path(log_file).is_absolute():
        log_file = str(settings.project_root / log_file)
    _configure_logging(log_file, args.verbose)

    banner = {
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "config": str(settings.config_path),
        "cdn_host": settings.cdn_host,
        "timeout": list(settings.request_timeout),
        "log_file": log_file,
    }
    print(f"STARTING LOGO FETCH {json.dumps(banner, ensure_ascii=True)}", flush=True)

    try:
        counts = run_loop(settings, max_cycles=args.max_cycles)
    except (KeyboardInterrupt, EOFError):
        print("\nStopped.", flush=True)
        return 0
    print(f"LOGO FETCH DONE {json.dumps(dict(counts), ensure_ascii=True)}", flush=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
