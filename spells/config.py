from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Set

import yaml

from .errors import ConfigError


@dataclass
class BuildConfig:
    """
    What to build, read from a YAML file:

        write:
          - src: index.spl
            dst: build/index.html
        watch:
          - parts/*.spl
        final: false
        convert_script_extension_to_js: true
    """
    write_pairs: Dict[Path, Path]
    watch_paths: Set[Path] = field(default_factory=set)
    final: bool = False
    convert_script_extension_to_js: bool = False


def load_config(config_path, base_path: Optional[Path] = None) -> BuildConfig:
    """Loads a build config. Relative paths are taken from the config file's directory."""
    config_path = Path(config_path)
    base_path = base_path if base_path is not None else config_path.parent
    with open(config_path, "r") as f:
        cfg = yaml.safe_load(f) or {}

    if not isinstance(cfg, dict):
        raise ConfigError(f"{config_path}: expected a mapping at the top level")
    if not cfg.get('write'):
        raise ConfigError(f"{config_path}: 'write' needs at least one src/dst pair")

    write_pairs: Dict[Path, Path] = {}
    for to_write in cfg['write']:
        if not isinstance(to_write, dict) or 'src' not in to_write or 'dst' not in to_write:
            raise ConfigError(f"{config_path}: every 'write' entry needs 'src' and 'dst', got {to_write!r}")
        write_pairs[base_path / to_write['src']] = base_path / to_write['dst']

    watch_paths = {watch_path for watch_path_str in cfg.get('watch') or []
                   for watch_path in base_path.glob(watch_path_str)}

    return BuildConfig(
        write_pairs=write_pairs,
        watch_paths=watch_paths,
        final=bool(cfg.get('final', False)),
        convert_script_extension_to_js=bool(cfg.get('convert_script_extension_to_js', False)),
    )
