"""Application configuration loader.

Every section is optional. URIs and secrets are read from the
environment (PSG_MONGO_URI, PSG_ID_TOKEN, PSG_TOKEN_SECRET) rather than
the YAML file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from perfectscrabble.core.scorer import DEFAULT_SCORER_URL
from perfectscrabble.core.store import DEFAULT_COLLECTION, DEFAULT_DB_NAME


@dataclass
class StoreConfig:
    uri: str | None = None  # falls back to PSG_MONGO_URI
    db_name: str = DEFAULT_DB_NAME
    collection: str = DEFAULT_COLLECTION


@dataclass
class EndpointConfig:
    write_url: str = "http://127.0.0.1:8787/api/write"
    scorer_url: str = DEFAULT_SCORER_URL
    timeout_s: float = 30.0


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8787


@dataclass
class BrowserConfig:
    page_size: int = 5
    sort: str = "timestamp"  # "timestamp" or "totalScore"


@dataclass
class AppConfig:
    store: StoreConfig = field(default_factory=StoreConfig)
    endpoints: EndpointConfig = field(default_factory=EndpointConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    browser: BrowserConfig = field(default_factory=BrowserConfig)
    export_dir: Path = Path(".")

    @property
    def mongo_uri(self) -> str | None:
        return self.store.uri or os.environ.get("PSG_MONGO_URI")


def load_config(path: Path | None = None) -> AppConfig:
    """Load config from a YAML file; defaults when ``path`` is None."""
    if path is None:
        return AppConfig()

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    s = raw.get("store", {})
    e = raw.get("endpoints", {})
    sv = raw.get("server", {})
    b = raw.get("browser", {})

    sort = b.get("sort", "timestamp")
    if sort not in ("timestamp", "totalScore"):
        raise ValueError(f"browser.sort must be 'timestamp' or 'totalScore', got {sort!r}")

    page_size = int(b.get("page_size", 5))
    if page_size < 1:
        raise ValueError(f"browser.page_size must be >= 1, got {page_size}")

    return AppConfig(
        store=StoreConfig(
            uri=s.get("uri"),
            db_name=s.get("db_name", DEFAULT_DB_NAME),
            collection=s.get("collection", DEFAULT_COLLECTION),
        ),
        endpoints=EndpointConfig(
            write_url=e.get("write_url", "http://127.0.0.1:8787/api/write"),
            scorer_url=e.get("scorer_url", DEFAULT_SCORER_URL),
            timeout_s=float(e.get("timeout_s", 30.0)),
        ),
        server=ServerConfig(
            host=sv.get("host", "127.0.0.1"),
            port=int(sv.get("port", 8787)),
        ),
        browser=BrowserConfig(page_size=page_size, sort=sort),
        export_dir=Path(raw.get("export_dir", ".")),
    )
