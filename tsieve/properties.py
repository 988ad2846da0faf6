"""
Sieve properties file.

Properties are kept in one YAML mapping, with one section per sieve:

    sieves: [reichenbach, baseline_event_dct]
    reichenbach:
      sentence_window: 1
      require_tense_divergence: false
    timex:
      correct_values: true

When no path is given, the file named by the TSIEVE_PROPERTIES environment
variable is used (a .env file is honoured). Without either, every option
takes its default.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from tsieve.logger import get_logger

logger = get_logger(__name__)

PROPERTIES_ENV_VAR = "TSIEVE_PROPERTIES"

_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0"}


@dataclass
class SieveProperties:
    """Parsed properties, looked up by section and key."""
    data: Dict[str, Any] = field(default_factory=dict)
    source_path: Optional[Path] = None

    @classmethod
    def from_yaml(cls, path: Path) -> "SieveProperties":
        """Load and validate properties from a YAML file."""
        path = Path(path)
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise TypeError(f"Expected YAML top-level mapping (dict), got {type(data).__name__}")
        logger.info(f"Loaded sieve properties from {path}")
        return cls(data=data, source_path=path)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "SieveProperties":
        """Load from path, else from $TSIEVE_PROPERTIES, else return empty properties."""
        if path is None:
            load_dotenv()
            env_path = os.getenv(PROPERTIES_ENV_VAR)
            if env_path:
                path = Path(env_path)
        if path is None:
            return cls()
        return cls.from_yaml(path)

    def section(self, name: str) -> Dict[str, Any]:
        value = self.data.get(name) or {}
        if not isinstance(value, dict):
            raise TypeError(f"Properties section '{name}' must be a mapping, got {type(value).__name__}")
        return value

    def get_int(self, section: str, key: str, default: int) -> int:
        value = self.section(section).get(key)
        if value is None:
            return default
        return parse_int(value, f"{section}.{key}")

    def get_bool(self, section: str, key: str, default: bool) -> bool:
        value = self.section(section).get(key)
        if value is None:
            return default
        return parse_bool(value, f"{section}.{key}")

    def sieve_names(self) -> List[str]:
        names = self.data.get("sieves") or []
        if isinstance(names, str):
            names = [names]
        return [str(n) for n in names]


def parse_int(value: Any, name: str) -> int:
    """Interpret a YAML/str integer strictly; booleans and fractional numbers are rejected."""
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")


def parse_bool(value: Any, name: str) -> bool:
    """Interpret a YAML/str flag strictly; anything unrecognized is a configuration error."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")
