from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from itertools import islice
from typing import Callable, Iterator

import requests

from logocatalog.assets.fetch import Download, build_session, resolve_asset
from logocatalog.catalog import StoreEntry, append_entry, build_entry, load_catalog, save_catalog
from logocatalog.config import ConfigError, StoreConfig, ensure_output_dirs, load_store_config
from logocatalog.settings import Settings

Prompt = Callable[[str], str]

YES_ANSWERS = {"y", "yes"}
NO_ANSWERS = {"n", "no"}

logger = logging.getLogger("cycle")


class CycleStatus(str, Enum):
    SAVED = "saved"
    CONFIG_ERROR = "config_error"
    DIRECTORY_ERROR = "directory_error"
    NO_IDENTIFIER = "no_identifier"
    NOT_FOUND = "not_found"
    DECLINED = "declined"
    NO_NAME = "no_name"
    CATALOG_ERROR = "catalog_error"


@dataclass
class CycleResult:
    status: CycleStatus
    identifier: str | None = None
    download: Download | None = None
    entry: StoreEntry | None = None


def ask_yes_no(prompt: Prompt, question: str) -> bool:
    while True:
        answer = prompt(f"{question} [y/n]: ").strip().lower()
        if answer in YES_ANSWERS:
            return True
        if answer in NO_ANSWERS:
            return False
        print("Please answer y or n.")


def run_cycle(
    config: StoreConfig,
    session: requests.Session,
    settings: Settings,
    prompt: Prompt = input,
) -> CycleResult:
    """One pass from the identifier prompt to the catalog write.

    Every failure is reported and turned into a status; the caller decides
    whether to loop again.
    """
    try:
        paths = ensure_output_dirs(config)
    except OSError as exc:
        logger.error("DIRECTORY ERROR %s %s", config.output_path, exc)
        return CycleResult(CycleStatus.DIRECTORY_ERROR)

    identifier = prompt("Store identifier (domain, brand id, ISIN or ticker): ").strip()
    if not identifier:
        return CycleResult(CycleStatus.NO_IDENTIFIER)

    download = resolve_asset(
        identifier,
        session,
        paths.logos_dir,
        client_id=config.client_id,
        cdn_host=settings.cdn_host,
        timeout=settings.request_timeout,
    )
    if download is None:
        print(f"No logo variant could be downloaded for {identifier}.")
        return CycleResult(CycleStatus.NOT_FOUND, identifier=identifier)

    print(f"Saved {download.path} ({download.candidate.label}, {download.result.message})")

    if not download.result.is_svg:
        content_type = download.result.content_type or "unknown type"
        if not ask_yes_no(prompt, f"Downloaded logo is not SVG ({content_type}). Continue?"):
            logger.info("DECLINED %s %s", identifier, download.path)
            return CycleResult(CycleStatus.DECLINED, identifier=identifier, download=download)

    name = prompt("Store name: ").strip()
    if not name:
        return CycleResult(CycleStatus.NO_NAME, identifier=identifier, download=download)

    entry = build_entry(name, identifier)
    try:
        entries = load_catalog(paths.catalog_path)
        entries = append_entry(entries, entry)
        save_catalog(paths.catalog_path, entries)
    except OSError as exc:
        logger.error("CATALOG ERROR %s %s", paths.catalog_path, exc)
        return CycleResult(CycleStatus.CATALOG_ERROR, identifier=identifier, download=download, entry=entry)

    logger.info("CATALOG UPDATED %s entries=%s source=%s", paths.catalog_path, len(entries), identifier)
    print(f"Added '{name}' to {paths.catalog_path}")
    return CycleResult(CycleStatus.SAVED, identifier=identifier, download=download, entry=entry)


def iter_cycles(
    settings: Settings,
    *,
    prompt: Prompt = input,
    session: requests.Session | None = None,
) -> Iterator[CycleResult]:
    owns_session = session is None
    if session is None:
        session = build_session(settings.user_agent, settings.max_retries)

    try:
        while True:
            # reloaded every cycle so the side file can be edited while running
            try:
                config = load_store_config(settings.config_path, settings.client_id)
            except ConfigError as exc:
                logger.error("CONFIG ERROR %s", exc)
                yield CycleResult(CycleStatus.CONFIG_ERROR)
                prompt("Fix the configuration file, then press Enter to retry: ")
                continue

            result = run_cycle(config, session, settings, prompt)
            logger.info("CYCLE %s %s", result.status.value, result.identifier or "-")
            yield result
            if result.status is CycleStatus.DIRECTORY_ERROR:
                prompt(f"Cannot create {config.output_path}; fix it, then press Enter to retry: ")
    finally:
        if owns_session:
            session.close()


def run_loop(
    settings: Settings,
    *,
    prompt: Prompt = input,
    session: requests.Session | None = None,
    max_cycles: int | None = None,
) -> Counter:
    counts: Counter = Counter()
    cycles = iter_cycles(settings, prompt=prompt, session=session)
    try:
        for result in islice(cycles, max_cycles):
            counts[result.status.value] += 1
    finally:
        cycles.close()
    return counts
