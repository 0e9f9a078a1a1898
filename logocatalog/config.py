from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import yaml


class ConfigError(Exception):
    """Raised when the side configuration file cannot be used for a cycle."""


@dataclass(frozen=True)
class StoreConfig:
    output_path: Path
    client_id: str


@dataclass(frozen=True)
class OutputPaths:
    root: Path
    logos_dir: Path
    json_dir: Path
    catalog_path: Path


def _parse_config_text(path: Path, text: str):
    if path.suffix.lower() in {".yaml", ".yml"}:
        return yaml.safe_load(text)
    return json.loads(text)


def load_store_config(path: Path, default_client_id: str | None = None) -> StoreConfig:
    """Read the side file that says where logos and the catalog are written.

    The file must hold an object with a non-empty ``outputPath``. An optional
    ``clientId`` overrides the token from the environment. Relative output
    paths are resolved against the directory holding the side file.
    """
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        data = _parse_config_text(path, path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Config file unreadable: {path} ({exc})") from exc
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Config file is not valid: {path} ({exc})") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain an object: {path}")

    output_raw = data.get("outputPath")
    if not isinstance(output_raw, str) or not output_raw.strip():
        raise ConfigError(f"Config file lacks 'outputPath': {path}")

    client_id = data.get("clientId") or default_client_id
    if not client_id:
        raise ConfigError("No CDN client id: set 'clientId' in the config file or BRANDFETCH_CLIENT_ID")

    output_path = Path(output_raw.strip()).expanduser()
    if not output_path.is_absolute():
        output_path = path.resolve().parent / output_path

    return StoreConfig(output_path=output_path, client_id=str(client_id))


def ensure_output_dirs(config: StoreConfig) -> OutputPaths:
    root = config.output_path
    logos_dir = root / "logos"
    json_dir = root / "json"
    for directory in (root, logos_dir, json_dir):
        directory.mkdir(parents=True, exist_ok=True)
    return OutputPaths(
        root=root,
        logos_dir=logos_dir,
        json_dir=json_dir,
        catalog_path=json_dir / "stores.json",
    )
