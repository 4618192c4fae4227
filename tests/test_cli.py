import pytest
from pathlib import Path
from click.testing import CliRunner

from moustachu import __version__
from moustachu.cli.interface import main_cli_group


@pytest.fixture
def runner():
    return CliRunner()


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_render_to_stdout(runner):
    with runner.isolated_filesystem() as td:
        proj_dir = Path(td)
        _write(proj_dir / "data.json", '{"name": "World"}')
        _write(proj_dir / "hello.mustache", "Hello, {{name}}!")

        result = runner.invoke(main_cli_group, ["render", "data.json", "hello.mustache"], catch_exceptions=False)

        assert result.exit_code == 0
        assert result.stdout == "Hello, World!"


def test_render_to_output_file(runner):
    with runner.isolated_filesystem() as td:
        proj_dir = Path(td)
        _write(proj_dir / "data.json", '{"items": ["a", "b"]}')
        _write(proj_dir / "list.mustache", "{{#items}}\n- {{.}}\n{{/items}}\n")

        result = runner.invoke(main_cli_group, ["render", "data.json", "list.mustache", "-o", "out.txt"])

        assert result.exit_code == 0
        assert (proj_dir / "out.txt").read_text(encoding="utf-8") == "- a\n- b\n"
        assert "Output written to: out.txt" in result.output


def test_render_toml_data(runner):
    with runner.isolated_filesystem() as td:
        proj_dir = Path(td)
        _write(proj_dir / "data.toml", '[owner]\nname = "Tom"\n')
        _write(proj_dir / "t.mustache", "{{owner.name}}")

        result = runner.invoke(main_cli_group, ["render", "data.toml", "t.mustache"])

        assert result.exit_code == 0
        assert result.stdout == "Tom"


def test_format_option_overrides_suffix(runner):
    with runner.isolated_filesystem() as td:
        proj_dir = Path(td)
        _write(proj_dir / "data.cfg", 'name = "cfg"\n')
        _write(proj_dir / "t.mustache", "{{name}}")

        result = runner.invoke(main_cli_group, ["render", "data.cfg", "t.mustache", "--format", "toml"])

        assert result.exit_code == 0
        assert result.stdout == "cfg"


def test_named_partial_option(runner):
    with runner.isolated_filesystem() as td:
        proj_dir = Path(td)
        _write(proj_dir / "data.json", '{"user": {"name": "Ann"}}')
        _write(proj_dir / "card.mustache", "[{{name}}]")
        _write(proj_dir / "page.mustache", "{{#user}}{{>card}}{{/user}}")

        result = runner.invoke(main_cli_group, ["render", "data.json", "page.mustache", "-p", "card=card.mustache"])

        assert result.exit_code == 0
        assert result.stdout == "[Ann]"


def test_partials_dir_with_indentation(runner):
    with runner.isolated_filesystem() as td:
        proj_dir = Path(td)
        (proj_dir / "partials").mkdir()
        _write(proj_dir / "partials" / "body.mustache", "line1\nline2\n")
        _write(proj_dir / "data.json", "{}")
        _write(proj_dir / "page.mustache", "<div>\n  {{>body}}\n</div>\n")

        result = runner.invoke(main_cli_group, ["render", "data.json", "page.mustache", "--partials-dir", "partials"])

        assert result.exit_code == 0
        assert result.stdout == "<div>\n  line1\n  line2\n</div>\n"


def test_project_config_supplies_partials_dir(runner):
    with runner.isolated_filesystem() as td:
        proj_dir = Path(td)
        (proj_dir / "parts").mkdir()
        _write(proj_dir / "parts" / "sig.hbs", "-- {{who}}")
        _write(proj_dir / ".moustachu.toml", 'partials_dir = "parts"\npartial_extension = ".hbs"\n')
        _write(proj_dir / "data.json", '{"who": "me"}')
        _write(proj_dir / "mail.mustache", "hi {{>sig}}")

        result = runner.invoke(main_cli_group, ["render", "data.json", "mail.mustache"])

        assert result.exit_code == 0
        assert result.stdout == "hi -- me"


def test_invalid_partial_pair_is_an_error(runner):
    with runner.isolated_filesystem() as td:
        proj_dir = Path(td)
        _write(proj_dir / "data.json", "{}")
        _write(proj_dir / "t.mustache", "x")

        result = runner.invoke(main_cli_group, ["render", "data.json", "t.mustache", "-p", "no-equals-sign"])

        assert result.exit_code == 1
        assert "expected NAME=PATH" in result.output


def test_syntax_error_exits_non_zero(runner):
    with runner.isolated_filesystem() as td:
        proj_dir = Path(td)
        _write(proj_dir / "data.json", "{}")
        _write(proj_dir / "bad.mustache", "Hello {{name")

        result = runner.invoke(main_cli_group, ["render", "data.json", "bad.mustache"])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "unterminated" in result.output


def test_unbalanced_sections_exit_non_zero(runner):
    with runner.isolated_filesystem() as td:
        proj_dir = Path(td)
        _write(proj_dir / "data.json", "{}")
        _write(proj_dir / "bad.mustache", "{{#a}}never closed")

        result = runner.invoke(main_cli_group, ["render", "data.json", "bad.mustache"])

        assert result.exit_code == 1
        assert "unclosed section" in result.output


def test_invalid_data_exits_non_zero(runner):
    with runner.isolated_filesystem() as td:
        proj_dir = Path(td)
        _write(proj_dir / "data.json", "{oops")
        _write(proj_dir / "t.mustache", "x")

        result = runner.invoke(main_cli_group, ["render", "data.json", "t.mustache"])

        assert result.exit_code == 1
        assert "could not parse json" in result.output


def test_partial_recursion_limit_option(runner):
    with runner.isolated_filesystem() as td:
        proj_dir = Path(td)
        _write(proj_dir / "data.json", '{"loop": "{{>loop}}"}')
        _write(proj_dir / "t.mustache", "{{>loop}}")

        result = runner.invoke(main_cli_group, ["render", "data.json", "t.mustache", "--max-partial-depth", "3"])

        assert result.exit_code == 1
        assert "maximum nesting depth of 3" in result.output


def test_missing_template_file_is_a_usage_error(runner):
    with runner.isolated_filesystem() as td:
        _write(Path(td) / "data.json", "{}")
        result = runner.invoke(main_cli_group, ["render", "data.json", "missing.mustache"])
        assert result.exit_code == 2


def test_tokens_command_lists_tokens(runner):
    with runner.isolated_filesystem() as td:
        _write(Path(td) / "t.mustache", "Hi {{#list}}{{.}}{{/list}}")

        result = runner.invoke(main_cli_group, ["tokens", "t.mustache"])

        assert result.exit_code == 0
        assert "section" in result.output
        assert "ender" in result.output
        assert "escaped_variable" in result.output


def test_tokens_command_reports_syntax_errors(runner):
    with runner.isolated_filesystem() as td:
        _write(Path(td) / "t.mustache", "{{#broken")

        result = runner.invoke(main_cli_group, ["tokens", "t.mustache"])

        assert result.exit_code == 1
        assert "Error:" in result.output


def test_version_option(runner):
    result = runner.invoke(main_cli_group, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
