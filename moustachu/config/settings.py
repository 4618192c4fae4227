from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional
import structlog

from moustachu.core.renderer import DEFAULT_MAX_PARTIAL_DEPTH
from moustachu.exceptions import ConfigError

log = structlog.get_logger(__name__)

DEFAULT_PARTIAL_EXTENSION = ".mustache"


class DataFormat(Enum):
    # supported formats for the data file a context is built from.
    JSON = "json"
    TOML = "toml"

    @classmethod
    def from_string(cls, s: Optional[str]) -> Optional["DataFormat"]:
        if not s:
            return None
        try:
            return cls(s.lower().lstrip("."))
        except ValueError:
            log.warning("invalid_data_format_string", input_string=s)
            return None

    @classmethod
    def from_path(cls, path: Path) -> "DataFormat":
        # picks the format from the file suffix, json unless it says otherwise.
        suffix = path.suffix.lower().lstrip(".")
        for member in cls:
            if member.value == suffix:
                return member
        return cls.JSON

@dataclass
class RenderConfig:
    # holds all configuration parameters for a single run.
    data_path: Optional[Path] = None
    template_path: Optional[Path] = None
    output_file: Optional[Path] = None
    data_format: Optional[DataFormat] = None
    partials: Dict[str, Path] = field(default_factory=dict)
    partials_dir: Optional[Path] = None
    partial_extension: str = DEFAULT_PARTIAL_EXTENSION
    max_partial_depth: int = DEFAULT_MAX_PARTIAL_DEPTH
    strip_bom: bool = True

    # internal state, not set directly by user flags.
    base_dir: Path = field(init=False)

    def __post_init__(self):
        # performs initial setup after dataclass instantiation.
        self.base_dir = Path.cwd().resolve()
        if self.max_partial_depth < 1:
            raise ConfigError(f"max_partial_depth must be at least 1, got {self.max_partial_depth}")

    def effective_data_format(self) -> DataFormat:
        if self.data_format is not None:
            return self.data_format
        if self.data_path is not None:
            return DataFormat.from_path(self.data_path)
        return DataFormat.JSON
