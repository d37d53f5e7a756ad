#!/usr/bin/env python
import logging
import sys

import click

import exporter.compiler as compiler
import exporter.config_loader as config_loader
import exporter.drawio as drawio
import exporter.validation as validation
from exporter.exceptions import CanvasFormError
from exporter.snapshot import GraphSnapshot


__version__ = "0.1"


def my_excepthook(exc_type, exc_value, exc_traceback):
    print(f"Unhandled error: {exc_type}, {exc_value}, {exc_traceback}")


def _configure(debug: bool) -> None:
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        sys.excepthook = my_excepthook
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")


def _error(message: str) -> None:
    click.echo(click.style(f"\nERROR: {message}\n", fg="red", bold=True))
    sys.exit(1)


def _load_inputs(source: str, settings_file: str):
    """Read the snapshot and settings, exiting with a readable error on failure."""
    try:
        snapshot = GraphSnapshot.load(source)
        settings = config_loader.load_settings(settings_file or None)
    except (CanvasFormError, ValueError) as e:
        _error(str(e))
    return snapshot, settings


def _nothing_to_export(message: str) -> None:
    click.echo(click.style(f"\nINFO: {message}\n", fg="yellow", bold=True))
    sys.exit(0)


def _write_output(text: str, outfile: str, default_suffix: str) -> None:
    if not outfile.endswith(default_suffix):
        outfile += default_suffix
    with open(outfile, "w") as f:
        f.write(text)
    click.echo(f"\nExported to file {outfile}")
    click.echo("\nCompleted!")


@click.version_option(version=__version__, prog_name="canvasform")
@click.group()
def cli():
    """
    canvasform converts architecture canvas snapshots into Terraform, JSON and draw.io files

    For help with a specific command type:

    canvasform [COMMAND] --help

    """
    pass


@cli.command()
@click.option("--debug", is_flag=True, default=False, help="Dump exception tracebacks")
@click.option(
    "--source",
    required=True,
    help="Canvas snapshot JSON file (nodes, connections, securityGroups)",
)
@click.option(
    "--outfile",
    default="main",
    help="Filename for output Terraform (default main.tf)",
)
@click.option("--settings", default="", help="Path to export settings file (YAML)")
@click.option(
    "--validate",
    is_flag=True,
    default=False,
    help="Check the generated Terraform parses as HCL2",
)
@click.option(
    "--show", is_flag=True, default=False, help="Print the Terraform to the console"
)
def terraform(debug, source, outfile, settings, validate, show):
    """Exports Terraform HCL"""
    _configure(debug)
    snapshot, export_settings = _load_inputs(source, settings)
    if not compiler.has_exportable_nodes(snapshot, export_settings):
        _nothing_to_export(
            "Nothing to export. Add an EC2 instance, security group, Elastic IP, "
            "S3 bucket, VPC, CloudFront distribution, Lambda function or RDS instance first."
        )
    text = compiler.export_terraform(snapshot, export_settings)
    if validate:
        errors = validation.validate_hcl(text)
        if errors:
            _error(f"Generated Terraform failed HCL validation: {errors[0]}")
        click.echo(click.style("\nHCL validation passed", fg="green"))
    if show:
        click.echo(click.style("\nTerraform:\n", fg="white", bold=True))
        click.echo(text)
    _write_output(text, outfile, ".tf")


@cli.command()
@click.option("--debug", is_flag=True, default=False, help="Dump exception tracebacks")
@click.option(
    "--source",
    required=True,
    help="Canvas snapshot JSON file (nodes, connections, securityGroups)",
)
@click.option(
    "--outfile",
    default="architecture",
    help="Filename for output list (default architecture.json)",
)
@click.option("--settings", default="", help="Path to export settings file (YAML)")
def resources(debug, source, outfile, settings):
    """Lists Terraform resources with their HCL as JSON"""
    _configure(debug)
    snapshot, export_settings = _load_inputs(source, settings)
    if not compiler.has_exportable_nodes(snapshot, export_settings):
        _nothing_to_export("Nothing to export. No supported resources on the canvas.")
    text = compiler.export_json(snapshot, export_settings)
    _write_output(text, outfile, ".json")


@cli.command(name="drawio")
@click.option("--debug", is_flag=True, default=False, help="Dump exception tracebacks")
@click.option(
    "--source",
    required=True,
    help="Canvas snapshot JSON file (nodes, connections, securityGroups)",
)
@click.option(
    "--outfile",
    default="architecture",
    help="Filename for output diagram (default architecture.drawio)",
)
@click.option("--settings", default="", help="Path to export settings file (YAML)")
def drawio_command(debug, source, outfile, settings):
    """Exports a draw.io diagram of the canvas"""
    _configure(debug)
    snapshot, export_settings = _load_inputs(source, settings)
    if not snapshot.nodes:
        _nothing_to_export("Nothing to export. The canvas is empty.")
    text = drawio.export_drawio(snapshot, icon_origin=export_settings.icon_origin)
    _write_output(text, outfile, ".drawio")


if __name__ == "__main__":
    cli()
