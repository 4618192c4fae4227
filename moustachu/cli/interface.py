# moustachu/cli/interface.py
import sys
from pathlib import Path
from typing import Any, Dict, Tuple

import click
from click_option_group import optgroup
from rich.console import Console as RichConsole
from rich.markup import escape as escape_markup
from rich.table import Table
import structlog

from moustachu import __version__ as app_version
from moustachu.config.settings import RenderConfig, DataFormat, DEFAULT_PARTIAL_EXTENSION
from moustachu.config.loader import load_and_merge_configs, config_defaults_from_toml
from moustachu.logging_setup import configure_logging
from moustachu.core.data_loader import load_data, load_partials, merge_partials
from moustachu.core.output import write_to_stdout, write_to_file
from moustachu.core.renderer import Renderer
from moustachu.core.tokenizer import tokenize
from moustachu.exceptions import MoustachuError, ConfigError
from moustachu.util import read_text_file

log = structlog.get_logger(__name__)


def _log_level_from_verbosity(verbosity_level: int) -> str:
    if verbosity_level >= 2: return "debug"
    if verbosity_level == 1: return "info"
    return "warning"


def _parse_partial_pairs(pairs: Tuple[str, ...]) -> Dict[str, Path]:
    named: Dict[str, Path] = {}
    for pair in pairs:
        if "=" not in pair:
            raise ConfigError(f"invalid --partial '{pair}', expected NAME=PATH")
        name, path_str = pair.split("=", 1)
        if not name.strip():
            raise ConfigError(f"invalid --partial '{pair}', partial name is empty")
        named[name.strip()] = Path(path_str)
    return named


def _run_render_flow(config: RenderConfig):
    log.info("render_flow_started", data=str(config.data_path), template=str(config.template_path))
    template = read_text_file(config.template_path, strip_bom=config.strip_bom)
    data = load_data(config.data_path, config.effective_data_format(), strip_bom=config.strip_bom)
    partials = load_partials(config.partials, config.partials_dir, config.partial_extension, strip_bom=config.strip_bom)
    data = merge_partials(data, partials)

    rendered = Renderer(max_partial_depth=config.max_partial_depth).render(template, data)
    log.info("render_flow_complete", output_length=len(rendered))

    if config.output_file:
        write_to_file(config.output_file, rendered)
        click.echo(f"Info: Output written to: {config.output_file}", err=True)
    else:
        write_to_stdout(rendered)


def _handle_cli_errors(func, *args):
    # shared error boundary for every command.
    try:
        func(*args)
    except click.exceptions.Exit: raise
    except MoustachuError as e:
        log.error("handled_application_error_in_cli", error_type=type(e).__name__, message=str(e))
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    except click.ClickException: raise
    except Exception as e:
        log.critical("unexpected_critical_error_in_cli", message=str(e), exc_info=True)
        click.secho(f"Unexpected critical error: {e}. Please report this.", fg="red", err=True)
        sys.exit(1)


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option("--verbose", "-v", "verbosity_level", count=True, help="Verbosity: -v info, -vv debug.")
@click.option("--force-json-logs", "force_json_logs", is_flag=True, default=False, help="Force JSON logs.")
@click.version_option(version=app_version, package_name="moustachu", prog_name="moustachu", help="Show version and exit.")
def main_cli_group(verbosity_level: int, force_json_logs: bool):
    """moustachu: render mustache templates against JSON or TOML data."""
    configure_logging(log_level_str=_log_level_from_verbosity(verbosity_level), force_json_logs=force_json_logs)


@main_cli_group.command("render")
@click.argument("data_path", type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path))
@click.argument("template_path", type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path))
@optgroup.group("Data Options", help="How the context data is read.")
@optgroup.option("--format", "data_format_str", type=click.Choice([f.value for f in DataFormat]), default=None, help="Data file format. Default: guessed from the file suffix, else json.")
@optgroup.option("--keep-bom", "keep_bom", is_flag=True, default=False, help="Do not strip a UTF-8 byte order mark from input files.")
@optgroup.group("Partial Options", help="Where named partial templates come from.")
@optgroup.option("-p", "--partial", "partial_pairs", multiple=True, metavar="NAME=PATH", help="Register a partial template file under NAME.")
@optgroup.option("--partials-dir", "partials_dir", type=click.Path(exists=True, file_okay=False, path_type=Path), default=None, help="Register every partial file in this directory by its stem.")
@optgroup.option("--partial-ext", "partial_extension", default=None, help=f"Extension of files in --partials-dir. Default: {DEFAULT_PARTIAL_EXTENSION}.")
@optgroup.option("--max-partial-depth", "max_partial_depth", type=click.IntRange(min=1), default=None, help="Maximum nesting of partial expansion.")
@optgroup.group("Output & Configuration", help="Where output goes and which config profile applies.")
@optgroup.option("-o", "--output", "output_file", type=click.Path(dir_okay=False, writable=True, path_type=Path), default=None, help="Path to write the output to.")
@optgroup.option("--config-profile", "active_config_profile_name", default=None, help="Load a profile from config file(s).")
def render_command(data_path: Path, template_path: Path, **cli_params: Any):
    """Render TEMPLATE_PATH with the context read from DATA_PATH."""
    log.debug("cli_command_invoked", command="render", params=cli_params)

    def build_and_run():
        raw_configs = load_and_merge_configs()
        options = config_defaults_from_toml(raw_configs, cli_params.get("active_config_profile_name"))
        options["data_path"] = data_path
        options["template_path"] = template_path

        if cli_params.get("data_format_str"):
            options["data_format"] = DataFormat.from_string(cli_params["data_format_str"])
        if cli_params.get("keep_bom"):
            options["strip_bom"] = False
        if cli_params.get("partial_pairs"):
            options["partials"] = {**options.get("partials", {}), **_parse_partial_pairs(cli_params["partial_pairs"])}
        for attr in ("partials_dir", "partial_extension", "max_partial_depth", "output_file"):
            if cli_params.get(attr) is not None:
                options[attr] = cli_params[attr]

        _run_render_flow(RenderConfig(**options))

    _handle_cli_errors(build_and_run)


def _visible(value: str) -> str:
    return value.replace("\r", "\\r").replace("\n", "\\n").replace("\t", "\\t")


@main_cli_group.command("tokens")
@click.argument("template_path", type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path))
def tokens_command(template_path: Path):
    """Print the token stream of TEMPLATE_PATH (debugging aid)."""
    def show_tokens():
        template = read_text_file(template_path)
        table = Table(title=f"tokens: {template_path.name}")
        table.add_column("#", justify="right")
        table.add_column("type")
        table.add_column("value")
        for index, token in enumerate(tokenize(template)):
            table.add_row(str(index), token.type.value, escape_markup(_visible(token.value)))
        RichConsole().print(table)

    _handle_cli_errors(show_tokens)
