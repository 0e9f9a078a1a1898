import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_CDN_HOST = "cdn.brandfetch.io"
DEFAULT_USER_AGENT = "StoreLogoCatalog/1.0 (logo catalog maintenance)"


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip("\"").strip("'")
        os.environ.setdefault(key, value)


@dataclass(frozen=True)
class Settings:
    project_root: Path
    config_path: Path
    cdn_host: str
    client_id: str | None
    user_agent: str
    request_timeout: tuple[float, float]
    max_retries: int


@lru_cache
def get_settings() -> Settings:
    project_root = Path(__file__).resolve().parents[1]
    _load_env_file(project_root / ".env")

    config_raw = os.getenv("STORE_LOGOS_CONFIG")
    config_path = Path(config_raw).expanduser() if config_raw else project_root / "config.json"

    return Settings(
        project_root=project_root,
        config_path=config_path,
        cdn_host=os.getenv("BRANDFETCH_CDN_HOST", DEFAULT_CDN_HOST),
        client_id=os.getenv("BRANDFETCH_CLIENT_ID") or None,
        user_agent=os.getenv("FETCH_USER_AGENT", DEFAULT_USER_AGENT),
        request_timeout=(
            float(os.getenv("FETCH_CONNECT_TIMEOUT", "5")),
            float(os.getenv("FETCH_READ_TIMEOUT", "20")),
        ),
        max_retries=int(os.getenv("FETCH_MAX_RETRIES", "2")),
    )
