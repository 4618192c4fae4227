from pathlib import Path

import structlog

from moustachu.exceptions import DataLoadError

log = structlog.get_logger(__name__)
utf8_bom = b"\xef\xbb\xbf"

def strip_utf8_bom(data: bytes) -> bytes:
    # removes the utf-8 byte order mark from byte data if present.
    if data.startswith(utf8_bom):
        return data[len(utf8_bom):]
    return data

def read_text_file(path: Path, strip_bom: bool = True) -> str:
    # reads a utf-8 text file, dropping a leading bom unless told otherwise.
    log.debug("reading_text_file", path=str(path))
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise DataLoadError(f"failed to read file '{path}': {e}") from e
    if strip_bom:
        raw = strip_utf8_bom(raw)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DataLoadError(f"file '{path}' is not valid utf-8: {e}") from e
