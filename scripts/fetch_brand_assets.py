import argparse
import logging
import sys
from pathlib import Path

from logocatalog.assets.fetch import build_session, resolve_asset
from logocatalog.catalog import append_entry, build_entry, load_catalog, save_catalog
from logocatalog.config import ConfigError, ensure_output_dirs, load_store_config
from logocatalog.settings import get_settings


def parse_target(raw: str) -> tuple[str, str | None]:
    identifier, sep, name = raw.partition("=")
    return identifier.strip(), (name.strip() or None) if sep else None


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Download store logos without prompting.")
    parser.add_argument("targets", nargs="+", help="IDENTIFIER or IDENTIFIER=Store Name")
    parser.add_argument("--config", default=None)
    parser.add_argument(
        "--allow-raster",
        action="store_true",
        help="Catalog stores whose logo is not SVG instead of skipping them",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    settings = get_settings()
    config_path = Path(args.config).expanduser() if args.config else settings.config_path

    try:
        config = load_store_config(config_path, settings.client_id)
        paths = ensure_output_dirs(config)
    except (ConfigError, OSError) as exc:
        print(f"Cannot start: {exc}")
        return 1

    session = build_session(settings.user_agent, settings.max_retries)
    failures = 0
    for raw in args.targets:
        identifier, name = parse_target(raw)
        if not identifier:
            print(f"Skipping empty identifier in {raw!r}")
            failures += 1
            continue

        download = resolve_asset(
            identifier,
            session,
            paths.logos_dir,
            client_id=config.client_id,
            cdn_host=settings.cdn_host,
            timeout=settings.request_timeout,
        )
        if download is None:
            print(f"Not found: {identifier}")
            failures += 1
            continue
        print(f"Saved {download.path}")

        if not name:
            continue
        if not download.result.is_svg and not args.allow_raster:
            print(f"Not cataloged (not SVG): {identifier}")
            continue

        try:
            entries = append_entry(load_catalog(paths.catalog_path), build_entry(name, identifier))
            save_catalog(paths.catalog_path, entries)
        except OSError as exc:
            print(f"Catalog write failed for {identifier}: {exc}")
            failures += 1
            continue
        print(f"Cataloged {name} ({identifier})")

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
