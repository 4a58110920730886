"""CLI entry point for saloon-sdkgen."""

import logging
from pathlib import Path

import click

from saloon_sdkgen.codegen import CodeGenerator, default_post_processors
from saloon_sdkgen.config import load_config, sdk_namespace
from saloon_sdkgen.exceptions import ParserNotRegisteredError, SdkGenError
from saloon_sdkgen.parser.registry import parse_specification, registered_parser_types
from saloon_sdkgen.writer import (
    OutputWriter,
    WriteAction,
    WriteResult,
    plan_output_files,
    write_zip_archive,
)

# --type values people pass when they mean the file format.
_FILE_FORMATS = ("yml", "yaml", "json", "xml")

_RESULT_COLORS = {
    WriteAction.SKIPPED_EXISTS: "yellow",
    WriteAction.SKIPPED_PROTECTED: "yellow",
    WriteAction.FAILED: "red",
}


def _echo_result(result: WriteResult) -> None:
    message = result.message
    if result.error:
        message += f" ({result.error})"
    click.secho(message, fg=_RESULT_COLORS.get(result.action))


def _report_unregistered(e: ParserNotRegisteredError) -> None:
    click.secho(f"Error: {e}", fg="red", err=True)
    if e.spec_type in _FILE_FORMATS:
        click.echo(
            f"Note: --type is the specification type (e.g. openapi, postman), "
            f"not the file format ('{e.spec_type}').",
            err=True,
        )
    click.echo(f"Available types: {', '.join(e.available)}", err=True)


@click.group()
def main():
    """Saloon SDK Generator: build a Saloon PHP SDK from OpenAPI or Postman specs."""
    pass


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--type", "spec_type", default="openapi", show_default=True, help="Specification type (see `types`).")
@click.option("--name", default="Unnamed", show_default=True, help="Connector class name.")
@click.option("--namespace", default="App\\Sdk", show_default=True, help="Root namespace; generated code lives under <namespace>\\SDK.")
@click.option("--output", default="./build", show_default=True, type=click.Path(file_okay=False, path_type=Path), help="Output directory.")
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML generator config file.")
@click.option("--force", is_flag=True, help="Overwrite existing files (protected files are still kept).")
@click.option("--dry", is_flag=True, help="List the files that would be generated without writing them.")
@click.option("--zip", "as_zip", is_flag=True, help="Write a single zip archive instead of individual files.")
@click.option("--pest", is_flag=True, help="Generate Pest tests instead of PHPUnit.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def generate(
    path: Path,
    spec_type: str,
    name: str,
    namespace: str,
    output: Path,
    config_path: Path | None,
    force: bool,
    dry: bool,
    as_zip: bool,
    pest: bool,
    verbose: bool,
):
    """Generate a Saloon SDK from the API specification at PATH."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(config_path, connector_name=name, namespace=sdk_namespace(namespace))
        click.echo(f"Parsing {path} (type: {spec_type})...")
        spec = parse_specification(spec_type, path)
    except ParserNotRegisteredError as e:
        _report_unregistered(e)
        raise SystemExit(e.exit_code)
    except SdkGenError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        raise SystemExit(e.exit_code)

    click.echo(f"Found {len(spec.endpoints)} endpoints.")
    code = CodeGenerator(config, default_post_processors(pest=pest)).run(spec)

    if dry:
        click.echo("Dry run, no files written. Would generate:")
        for group, paths in plan_output_files(code, config).items():
            click.echo(f"{group}:")
            for file_path in paths:
                click.echo(f"  {file_path}")
        return

    if as_zip:
        _echo_result(write_zip_archive(code, config, output, force=force))
        return

    results = OutputWriter(output, force=force, on_result=_echo_result).write(code, config)
    created = sum(1 for r in results if r.action is WriteAction.CREATED)
    click.echo(f"Done! Generated {created} of {len(results)} files in {output}")


@main.command()
def types():
    """List the registered specification types."""
    for spec_type in registered_parser_types():
        click.echo(spec_type)
