from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote, urlencode

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from logocatalog.assets.naming import choose_extension, derive_base_name
from logocatalog.settings import DEFAULT_CDN_HOST, DEFAULT_USER_AGENT

DEFAULT_TIMEOUT = (5, 20)
CANDIDATE_LABELS = ("symbol.svg", "logo.svg", "symbol", "logo")
URL_TEMPLATE = "https://{host}/{identifier}/theme/dark/fallback/404/{label}?{query}"
SVG_SNIFF_BYTES = 1024


@dataclass(frozen=True)
class Candidate:
    url: str
    label: str


@dataclass
class FetchResult:
    success: bool
    status_code: int
    is_svg: bool
    content: bytes | None
    content_type: str | None
    message: str


@dataclass
class Download:
    candidate: Candidate
    result: FetchResult
    path: Path


def _get_logger(logger: logging.Logger | None) -> logging.Logger:
    if logger:
        return logger
    return logging.getLogger("fetch")


def build_candidates(identifier: str, client_id: str, cdn_host: str = DEFAULT_CDN_HOST) -> list[Candidate]:
    encoded = quote(identifier, safe="")
    query = urlencode({"c": client_id})
    return [
        Candidate(
            url=URL_TEMPLATE.format(host=cdn_host, identifier=encoded, label=label, query=query),
            label=label,
        )
        for label in CANDIDATE_LABELS
    ]


def build_session(user_agent: str = DEFAULT_USER_AGENT, max_retries: int = 2) -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    retry = Retry(
        total=max_retries,
        connect=max_retries,
        read=max_retries,
        backoff_factor=0.4,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET",),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def is_svg_response(content_type: str | None, content: bytes | None) -> bool:
    if content_type and "svg" in content_type.lower():
        return True
    if not content:
        return False
    head = content[:SVG_SNIFF_BYTES].decode("utf-8", errors="ignore").lower()
    return "<svg" in head


def fetch_candidate(
    session: requests.Session,
    candidate: Candidate,
    timeout: tuple[float, float] = DEFAULT_TIMEOUT,
    logger: logging.Logger | None = None,
) -> FetchResult:
    logger = _get_logger(logger)
    logger.info("GET %s %s", candidate.label, candidate.url)
    start = time.time()
    try:
        resp = session.get(candidate.url, timeout=timeout, allow_redirects=True)
    except requests.exceptions.Timeout:
        elapsed_ms = int((time.time() - start) * 1000)
        logger.warning("ERR Timeout %s %s", elapsed_ms, candidate.url)
        return FetchResult(False, 0, False, None, None, "request timed out")
    except requests.exceptions.TooManyRedirects:
        elapsed_ms = int((time.time() - start) * 1000)
        logger.warning("ERR TooManyRedirects %s %s", elapsed_ms, candidate.url)
        return FetchResult(False, 0, False, None, None, "too many redirects")
    except requests.exceptions.RequestException as exc:
        elapsed_ms = int((time.time() - start) * 1000)
        logger.warning("ERR %s %s %s", exc.__class__.__name__, elapsed_ms, candidate.url)
        return FetchResult(False, 0, False, None, None, f"request failed: {exc.__class__.__name__}")

    elapsed_ms = int((time.time() - start) * 1000)
    content = resp.content or b""
    content_type = resp.headers.get("content-type") or None
    logger.info("GOT %s %s %s %s", resp.status_code, elapsed_ms, len(content), content_type)

    if not 200 <= resp.status_code < 300:
        return FetchResult(False, resp.status_code, False, None, content_type, f"HTTP {resp.status_code}")

    is_svg = is_svg_response(content_type, content)
    kind = "SVG" if is_svg else (content_type or "unknown type")
    return FetchResult(True, resp.status_code, is_svg, content, content_type, f"HTTP {resp.status_code} {kind}")


def resolve_asset(
    identifier: str,
    session: requests.Session,
    logos_dir: Path,
    *,
    client_id: str,
    cdn_host: str = DEFAULT_CDN_HOST,
    timeout: tuple[float, float] = DEFAULT_TIMEOUT,
    logger: logging.Logger | None = None,
) -> Download | None:
    """Download the first available logo variant for ``identifier``.

    Candidates are tried in priority order and nothing after the first
    successfully saved variant is requested. A variant whose bytes cannot be
    written to disk counts as a failure and the next one is tried.
    """
    logger = _get_logger(logger)
    base_name = derive_base_name(identifier)

    for candidate in build_candidates(identifier, client_id, cdn_host):
        result = fetch_candidate(session, candidate, timeout, logger)
        if not result.success:
            logger.info("MISS %s %s", candidate.label, result.message)
            continue

        dest = logos_dir / f"{base_name}{choose_extension(result.is_svg, result.content_type)}"
        try:
            dest.write_bytes(result.content or b"")
        except OSError as exc:
            logger.error("WRITE ERROR %s %s", dest, exc)
            continue

        logger.info("SAVED %s variant=%s svg=%s", dest, candidate.label, result.is_svg)
        return Download(candidate=candidate, result=result, path=dest)

    logger.warning("NOT FOUND %s no variant succeeded", identifier)
    return None
