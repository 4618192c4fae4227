# moustachu/core/data_loader.py
"""
Builds Contexts from data files and collects partial templates from disk.

Partials are looked up in the context like any other value, so file-based
partials are merged into the root object before the Context is built.
"""
import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import structlog
import toml

from moustachu.config.settings import DataFormat, DEFAULT_PARTIAL_EXTENSION
from moustachu.exceptions import DataLoadError
from moustachu.util import read_text_file
from .context import Context

log = structlog.get_logger(__name__)


def parse_data(text: str, data_format: DataFormat, source: str = "<string>") -> Any:
    """Parses JSON or TOML text into plain Python data."""
    try:
        if data_format is DataFormat.TOML:
            return toml.loads(text)
        return json.loads(text)
    except (json.JSONDecodeError, toml.TomlDecodeError) as e:
        raise DataLoadError(f"could not parse {data_format.value} data from '{source}': {e}") from e


def load_data(path: Path, data_format: Optional[DataFormat] = None, strip_bom: bool = True) -> Any:
    data_format = data_format or DataFormat.from_path(path)
    log.info("loading_data_file", path=str(path), format=data_format.value)
    return parse_data(read_text_file(path, strip_bom=strip_bom), data_format, source=str(path))


def load_context(path: Path, data_format: Optional[DataFormat] = None, strip_bom: bool = True) -> Context:
    """Reads a data file and returns it as a Context."""
    return Context.from_data(load_data(path, data_format, strip_bom=strip_bom))


def load_partials(named_paths: Optional[Mapping[str, Path]] = None,
                  partials_dir: Optional[Path] = None,
                  extension: str = DEFAULT_PARTIAL_EXTENSION,
                  strip_bom: bool = True) -> Dict[str, str]:
    """Collects partial templates by name.

    Every `*<extension>` file in `partials_dir` is registered under its stem;
    explicit `named_paths` entries are read afterwards and win on name clashes.
    """
    partials: Dict[str, str] = {}
    if partials_dir is not None:
        if not partials_dir.is_dir():
            raise DataLoadError(f"partials directory '{partials_dir}' does not exist")
        for partial_path in sorted(partials_dir.glob(f"*{extension}")):
            if partial_path.is_file():
                name = partial_path.name[: -len(extension)] if extension else partial_path.stem
                partials[name] = read_text_file(partial_path, strip_bom=strip_bom)
        log.debug("partials_dir_scanned", path=str(partials_dir), count=len(partials))

    for name, partial_path in (named_paths or {}).items():
        if not partial_path.is_file():
            raise DataLoadError(f"partial '{name}' not found at '{partial_path}'")
        partials[name] = read_text_file(partial_path, strip_bom=strip_bom)
    return partials


def merge_partials(data: Any, partials: Mapping[str, str]) -> Any:
    """Returns `data` with partial bodies added as top-level keys.

    Keys already present in the data are kept as they are.
    """
    if not partials:
        return data
    if not isinstance(data, Mapping):
        raise DataLoadError("partials require the data root to be an object")
    merged = dict(data)
    for name, body in partials.items():
        if name in merged:
            log.warning("partial_shadowed_by_data_key", name=name)
            continue
        merged[name] = body
    return merged
