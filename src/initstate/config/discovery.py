"""Config file discovery and loading.

Settings live either in a dedicated ``initstate.toml`` or, for crates that
prefer a single manifest, in the ``[package.metadata.initstate]`` (or
``[workspace.metadata.initstate]``) table of ``Cargo.toml``. Discovery walks
up from the working directory like cargo does; in each directory the
dedicated file wins over the manifest. ``INITSTATE_CONFIG`` names a file
explicitly and disables the walk.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from initstate.config.models import InitStateConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "initstate.toml"
CARGO_MANIFEST = "Cargo.toml"
CONFIG_ENV_VAR = "INITSTATE_CONFIG"

_METADATA_TABLES = (
    ("package", "metadata", "initstate"),
    ("workspace", "metadata", "initstate"),
)


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path* as TOML. Raises ``tomllib.TOMLDecodeError`` on bad syntax."""
    return tomllib.loads(path.read_text(encoding="utf-8"))


def metadata_table(manifest: dict[str, Any]) -> dict[str, Any] | None:
    """The ``initstate`` metadata table of a parsed Cargo manifest, if any."""
    for keys in _METADATA_TABLES:
        node: Any = manifest
        for key in keys:
            node = node.get(key) if isinstance(node, dict) else None
        if isinstance(node, dict):
            return node
    return None


def config_table(path: Path) -> dict[str, Any]:
    """Settings held by *path*: a whole ``initstate.toml`` or a manifest's table."""
    data = read_toml(path)
    if path.name == CARGO_MANIFEST:
        return metadata_table(data) or {}
    return data


def _configured_manifest(directory: Path) -> Path | None:
    manifest = directory / CARGO_MANIFEST
    if not manifest.is_file():
        return None
    try:
        data = read_toml(manifest)
    except tomllib.TOMLDecodeError:
        # cargo reports broken manifests itself
        logger.debug("Skipping unparsable %s", manifest)
        return None
    return manifest if metadata_table(data) is not None else None


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for settings.

    Returns ``initstate.toml`` or a ``Cargo.toml`` carrying an ``initstate``
    metadata table, whichever is closest; None if neither exists.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        manifest = _configured_manifest(directory)
        if manifest is not None:
            return manifest
    return None


def load_config(path: Path | None = None, cwd: Path | None = None) -> InitStateConfig:
    """Load and validate settings from *path*, or from the discovered file.

    Returns the stock configuration when nothing is found.
    """
    if path is None:
        path = find_config(cwd)
    if path is None:
        return InitStateConfig()
    return InitStateConfig.model_validate(config_table(path))
