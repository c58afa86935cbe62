"""CLI entry point for api-json-validator."""

import sys
from pathlib import Path

import click

from api_json_validator.config import (
    ConfigError,
    ServiceConfiguration,
    Settings,
    load_service_configuration,
)
from api_json_validator.importer import HttpFetcher, Importer
from api_json_validator.logging import configure_logging
from api_json_validator.service import Service
from api_json_validator.spec.datatype import RawDatatype, TypeResolver
from api_json_validator.validator.pipeline import validate_api_json


def _load_config(config_path: Path | None, version: str | None) -> ServiceConfiguration:
    try:
        config = load_service_configuration(config_path) if config_path else ServiceConfiguration()
    except ConfigError as e:
        raise click.BadParameter(str(e), param_hint="--config") from e
    if version:
        config = config.model_copy(update={"version": version})
    return config


def _summary(service: Service) -> str:
    operations = sum(len(r.operations) for r in service.resources)
    return (
        f"Service {service.name} ({service.namespace}) is valid: "
        f"{len(service.models)} models, {len(service.enums)} enums, "
        f"{len(service.unions)} unions, {len(service.resources)} resources, "
        f"{operations} operations"
    )


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """API JSON Validator: check api.json service specifications."""
    settings = Settings()
    configure_logging("DEBUG" if verbose else settings.log_level)


@main.command()
@click.argument("doc_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path), help="YAML file with org_key, org_namespace and version.")
@click.option("--version", "version", default=None, help="Version of the service being validated.")
@click.option("--json", "as_json", is_flag=True, help="Print the built service as JSON.")
def validate(doc_path: Path, config_path: Path | None, version: str | None, as_json: bool):
    """Validate an api.json document."""
    config = _load_config(config_path, version)
    text = doc_path.read_text(encoding="utf-8")

    result = validate_api_json(text, config=config, importer=Importer(HttpFetcher(Settings())))

    if not result.valid:
        click.echo(f"{doc_path} has {len(result.errors)} error(s):", err=True)
        for error in result.errors:
            click.echo(f"  - {error}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(result.service.model_dump_json(indent=2))
    else:
        click.echo(_summary(result.service))


@main.command()
@click.argument("label")
@click.option("--enum", "enums", multiple=True, help="Declared enum name (repeatable).")
@click.option("--model", "models", multiple=True, help="Declared model name (repeatable).")
@click.option("--union", "unions", multiple=True, help="Declared union name (repeatable).")
def resolve(label: str, enums: tuple[str, ...], models: tuple[str, ...], unions: tuple[str, ...]):
    """Show how a datatype label resolves."""
    raw = RawDatatype.parse(label)
    for warning in raw.warnings:
        click.echo(f"Warning: {warning}", err=True)

    datatype = TypeResolver(enums=enums, models=models, unions=unions).parse(raw)
    if datatype is None:
        click.echo(f"Type[{raw.name}] not found", err=True)
        sys.exit(1)

    container = type(datatype).__name__
    click.echo(f"{datatype.label}: {container}({datatype.type.kind.value} {datatype.type.name})")
