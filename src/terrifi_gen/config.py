"""Configuration loading for the Terrifi import generator."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"
DEFAULT_SITE = "default"


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> dict[str, Any]:
    """Load the generator configuration file."""
    with open(config_path) as f:
        return cast(dict[str, Any], yaml.safe_load(f))


def load_live_dump(dump_path: Path, default_site: str) -> dict[str, list[dict[str, Any]]]:
    """
    Load previously fetched API objects from a JSON or YAML file.

    A top-level list is taken to belong to default_site; a mapping is read as
    site name -> list of objects.
    """
    with open(dump_path) as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if isinstance(data, list):
        sites = {default_site: data}
    elif isinstance(data, dict) and all(isinstance(v, list) for v in data.values()):
        sites = {str(site): objects for site, objects in data.items()}
    else:
        raise ValueError(f"{dump_path}: expected a list of objects or a mapping of site -> list")

    for site, objects in sites.items():
        for index, obj in enumerate(objects):
            if not isinstance(obj, dict):
                raise ValueError(f"{dump_path}: entry {index} of site '{site}' is not an object: {obj!r}")
    return sites


def get_log_level() -> int:
    """Get log level from the environment."""
    level_str = os.environ.get("TERRIFI_LOG_LEVEL", "WARNING").upper()
    return cast(int, getattr(logging, level_str, logging.WARNING))


@dataclass
class ClientConfig:
    """Connection settings for the UniFi controller."""

    api_url: str = ""
    username: str = ""
    password: str = ""
    api_key: str = ""
    site: str = DEFAULT_SITE
    allow_insecure: bool = False

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Read the same UNIFI_* variables the Terraform provider reads."""
        return cls(
            api_url=os.environ.get("UNIFI_API", ""),
            username=os.environ.get("UNIFI_USERNAME", ""),
            password=os.environ.get("UNIFI_PASSWORD", ""),
            api_key=os.environ.get("UNIFI_API_KEY", ""),
            site=os.environ.get("UNIFI_SITE") or DEFAULT_SITE,
            allow_insecure=os.environ.get("UNIFI_INSECURE") == "true",
        )

    def validate(self) -> None:
        """Raise ValueError when the settings cannot produce a working client."""
        if not self.api_url:
            raise ValueError("API URL is required (set UNIFI_API)")
        if not self.api_key and not (self.username and self.password):
            raise ValueError("either UNIFI_API_KEY or both UNIFI_USERNAME and UNIFI_PASSWORD are required")

    @property
    def auth_method(self) -> str:
        if self.api_key:
            return "API key"
        return f"username ({self.username})"
