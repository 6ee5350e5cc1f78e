"""Command-line interface for SQLON conversions."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .converter import SQLONConverter
from .types import ConversionResult


def _default_output(input_file: Path, old_suffix: str, new_suffix: str) -> Path:
    name = input_file.name
    if name.endswith(old_suffix):
        name = name[:-len(old_suffix)]
    return input_file.with_name(name + new_suffix)


def _report_failure(result: ConversionResult) -> None:
    click.echo("❌ Conversion failed:", err=True)
    for error in result.errors or []:
        click.echo(f"   • {error}", err=True)
    sys.exit(1)


def _echo_profile(converter: SQLONConverter) -> None:
    summary = converter.profiler.get_performance_summary()
    click.echo(f"⏱️  {summary['total_operations']} steps in {summary.get('total_duration', 0) * 1000:.1f} ms, "
               f"peak memory {summary.get('max_memory_peak_mb', 0):.1f} MB")
    for operation in summary.get('operations', []):
        click.echo(f"   {operation['name']:<22} {operation['duration'] * 1000:>8.1f} ms "
                   f"{operation['throughput']:>8.2f} MB/s")


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging and print roundtrip step timings')
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """SQLON - Convert between JSON, SQLON and SQL dumps."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )
    ctx.obj = SQLONConverter()


@main.command('to-sql')
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def to_sql(converter: SQLONConverter, input_file: Path):
    """Print the SQLite dump of a SQLON file."""
    result = converter.sqlon_to_sql(input_file.read_text(encoding='utf-8'))
    if not result.success:
        _report_failure(result)
    click.echo(result.output, nl=False)


@main.command('json-to-sqlon')
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('output_file', required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def json_to_sqlon(converter: SQLONConverter, input_file: Path, output_file: Optional[Path]):
    """Convert a JSON file to SQLON (default output: <input>.sqlon)."""
    output_file = output_file or _default_output(input_file, ".json", ".sqlon")
    result = converter.convert_file(input_file, output_file, converter.json_codec, converter.sqlon_codec)
    if not result.success:
        _report_failure(result)
    click.echo(f"✅ Wrote {result.table_count} tables to {output_file}")


@main.command('sqlon-to-json')
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument('output_file', required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def sqlon_to_json(converter: SQLONConverter, input_file: Path, output_file: Optional[Path]):
    """Convert a SQLON file to JSON (default output: <input>.json)."""
    output_file = output_file or _default_output(input_file, ".sqlon", ".json")
    result = converter.convert_file(input_file, output_file, converter.sqlon_codec, converter.json_codec)
    if not result.success:
        _report_failure(result)
    click.echo(f"✅ Wrote JSON from {result.table_count} tables to {output_file}")


@main.command('convert-json')
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def convert_json(converter: SQLONConverter, input_file: Path):
    """Convert JSON to SQLON and back, keeping the original file."""
    result = converter.convert_json(input_file)
    if not result.success:
        _report_failure(result)

    sqlon_path, roundtrip_path = result.artifacts
    click.echo(f"✅ Original JSON: {input_file}")
    click.echo(f"✅ SQLON: {sqlon_path}")
    click.echo(f"✅ Roundtrip JSON: {roundtrip_path}")


@main.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--out', '-o', 'out_dir', default='out', type=click.Path(file_okay=False, path_type=Path),
              help='Artifact directory (default: ./out)')
@click.pass_context
def roundtrip(ctx: click.Context, input_file: Path, out_dir: Path):
    """Run JSON → SQLON → SQL → SQLON → JSON, writing every intermediate artifact."""
    converter: SQLONConverter = ctx.obj
    result = converter.roundtrip(input_file, out_dir)
    if not result.success:
        _report_failure(result)

    click.echo(f"✅ Artefacts written to: {out_dir}")
    click.echo(f"📄 Log written to: {result.artifacts[-1]}")

    if ctx.find_root().params.get('verbose'):
        _echo_profile(converter)


@main.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_obj
def validate(converter: SQLONConverter, input_file: Path):
    """Check a JSON file for syntax errors and unsupported shapes."""
    validation = converter.validate_json(input_file.read_text(encoding='utf-8'))

    for warning in validation.warnings:
        click.echo(f"⚠️  {warning}")

    if not validation.is_valid:
        click.echo("❌ Invalid JSON:", err=True)
        for error in validation.errors:
            click.echo(f"   • {error.message} ({error.location})", err=True)
        sys.exit(1)

    click.echo(f"✅ {input_file} is valid")


if __name__ == '__main__':
    main()
