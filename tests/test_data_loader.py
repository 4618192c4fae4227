import pytest
from pathlib import Path

from moustachu.config.settings import DataFormat
from moustachu.core.context import ContextKind
from moustachu.core.data_loader import load_context, load_data, load_partials, merge_partials, parse_data
from moustachu.exceptions import DataLoadError


@pytest.fixture
def partials_dir(tmp_path: Path):
    """A directory of partial templates plus one unrelated file."""
    pdir = tmp_path / "partials"
    pdir.mkdir()
    (pdir / "header.mustache").write_text("<h1>{{title}}</h1>")
    (pdir / "footer.mustache").write_text("bye")
    (pdir / "notes.txt").write_text("not a partial")
    return pdir


def test_load_json_context(tmp_path: Path):
    data_file = tmp_path / "data.json"
    data_file.write_text('{"name": "World", "items": [1, 2]}')
    ctx = load_context(data_file)
    assert ctx.kind is ContextKind.OBJECT
    assert str(ctx.get("name")) == "World"
    assert len(ctx.get("items")) == 2


def test_load_toml_context_by_suffix(tmp_path: Path):
    data_file = tmp_path / "data.toml"
    data_file.write_text('title = "T"\n[owner]\nname = "O"\n')
    ctx = load_context(data_file)
    assert str(ctx.get("owner").get("name")) == "O"


def test_explicit_format_overrides_suffix(tmp_path: Path):
    data_file = tmp_path / "data.txt"
    data_file.write_text('key = "value"\n')
    assert load_data(data_file, DataFormat.TOML) == {"key": "value"}


def test_utf8_bom_is_stripped(tmp_path: Path):
    data_file = tmp_path / "bom.json"
    data_file.write_bytes(b"\xef\xbb\xbf" + b'{"a": 1}')
    assert load_data(data_file) == {"a": 1}


def test_bom_kept_on_request_breaks_json(tmp_path: Path):
    data_file = tmp_path / "bom.json"
    data_file.write_bytes(b"\xef\xbb\xbf" + b'{"a": 1}')
    with pytest.raises(DataLoadError):
        load_data(data_file, strip_bom=False)


def test_invalid_json_raises(tmp_path: Path):
    data_file = tmp_path / "bad.json"
    data_file.write_text("{not json")
    with pytest.raises(DataLoadError, match="could not parse json"):
        load_context(data_file)


def test_invalid_toml_raises():
    with pytest.raises(DataLoadError, match="could not parse toml"):
        parse_data('a = "unterminated', DataFormat.TOML)


def test_missing_data_file_raises(tmp_path: Path):
    with pytest.raises(DataLoadError, match="failed to read"):
        load_context(tmp_path / "missing.json")


def test_load_partials_from_directory(partials_dir: Path):
    partials = load_partials(partials_dir=partials_dir)
    assert partials == {"header": "<h1>{{title}}</h1>", "footer": "bye"}


def test_load_partials_with_custom_extension(partials_dir: Path):
    assert load_partials(partials_dir=partials_dir, extension=".txt") == {"notes": "not a partial"}


def test_named_partials_win_over_directory(partials_dir: Path, tmp_path: Path):
    override = tmp_path / "other.mustache"
    override.write_text("custom footer")
    partials = load_partials({"footer": override}, partials_dir)
    assert partials["footer"] == "custom footer"
    assert partials["header"] == "<h1>{{title}}</h1>"


def test_missing_named_partial_raises(tmp_path: Path):
    with pytest.raises(DataLoadError, match="partial 'x' not found"):
        load_partials({"x": tmp_path / "nope.mustache"})


def test_missing_partials_dir_raises(tmp_path: Path):
    with pytest.raises(DataLoadError, match="does not exist"):
        load_partials(partials_dir=tmp_path / "nope")


def test_merge_partials_adds_top_level_keys():
    merged = merge_partials({"a": 1}, {"p": "body"})
    assert merged == {"a": 1, "p": "body"}


def test_merge_partials_keeps_existing_data_keys():
    data = {"p": "from data"}
    assert merge_partials(data, {"p": "from file"}) == {"p": "from data"}


def test_merge_partials_does_not_mutate_input():
    data = {"a": 1}
    merge_partials(data, {"p": "body"})
    assert data == {"a": 1}


def test_merge_partials_requires_object_root():
    with pytest.raises(DataLoadError, match="object"):
        merge_partials([1, 2], {"p": "body"})


def test_merge_without_partials_returns_data_as_is():
    data = [1, 2]
    assert merge_partials(data, {}) is data
