"""Configuration models and loading."""

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

CONFIG_DIR = Path.home() / ".config" / "proxy-forward"
CONFIG_FILE = CONFIG_DIR / "config.json"


class ProxySettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = True
    keep_alive_timeout: int = 5


class ForwardSettings(BaseModel):
    """Forwarder plugin configuration.

    An empty header value removes that header from forwarded requests.
    """

    name: str = "proxy-forward"
    trigger_header: str = "Location"
    headers: dict[str, str] = Field(default_factory=dict)


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    forward: ForwardSettings = Field(default_factory=ForwardSettings)


def load_config(path: Path = CONFIG_FILE) -> Config:
    """Load configuration from JSON file, creating default if needed."""
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        default = Config()
        path.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(path.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = path.with_suffix(".json.bak")
        path.rename(backup)
        default = Config()
        path.write_text(default.model_dump_json(indent=2))
        return default
