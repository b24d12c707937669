"""
Config loader - reads .tfsentinel.yml settings

Example:

    exclude:
      - AWS002
      - GEN003
    minimum_severity: warning
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml

from .errors import ConfigError
from .models import Severity

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ('.tfsentinel.yml', '.tfsentinel.yaml')

_KNOWN_KEYS = {'exclude', 'minimum_severity'}


@dataclass
class ScanConfig:
    """Settings that shape which checks run"""
    exclude: List[str] = field(default_factory=list)
    minimum_severity: Optional[Severity] = None

    def merge_exclude(self, codes: List[str]) -> None:
        """Add codes from the command line, keeping the first occurrence of each."""
        for code in codes:
            code = code.strip().upper()
            if code and code not in self.exclude:
                self.exclude.append(code)


def find_config(directory: Union[str, Path]) -> Optional[Path]:
    """Return the config file in a directory, if there is one."""
    for name in CONFIG_FILENAMES:
        candidate = Path(directory) / name
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Union[str, Path]) -> ScanConfig:
    """
    Load settings from a YAML file.

    Raises:
        ConfigError: the file cannot be read, is not valid YAML or holds
            values of the wrong type.
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Unable to read config file {path}: {e.strerror or e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {path}: {e}") from e

    logger.info(f"Loaded config from {path}")
    return parse_config(data, str(path))


def parse_config(data: Any, source: str = "<config>") -> ScanConfig:
    """Build a ScanConfig from already-parsed YAML data."""
    if data is None:
        return ScanConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{source}: expected a mapping at the top level")

    for key in sorted(set(data) - _KNOWN_KEYS, key=str):
        logger.warning(f"{source}: ignoring unknown key '{key}'")

    config = ScanConfig()
    config.merge_exclude(_parse_exclude(data.get('exclude'), source))

    minimum = data.get('minimum_severity')
    if minimum is not None:
        if not isinstance(minimum, str):
            raise ConfigError(f"{source}: minimum_severity must be a string")
        try:
            config.minimum_severity = Severity.from_string(minimum)
        except ValueError as e:
            raise ConfigError(f"{source}: {e}") from e

    return config


def _parse_exclude(raw: Any, source: str) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return raw.split(',')
    if isinstance(raw, list) and all(isinstance(code, str) for code in raw):
        return raw
    raise ConfigError(f"{source}: exclude must be a list of check codes")

