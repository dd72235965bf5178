import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer

from rx_intake.codec.decoder import to_flat_record
from rx_intake.codec.encoder import encode
from rx_intake.codec.models import coerce_record
from rx_intake.commons.config import load_cfg
from rx_intake.commons.exceptions import IntakeError
from rx_intake.commons.logger import setup_logging
from rx_intake.services.examples import get_example
from rx_intake.validation.validators import validate

app = typer.Typer(add_completion=False, help="Prescription intake toolkit")


def _bootstrap(config: Optional[str]):
    cfg = load_cfg(config)
    logger = setup_logging(cfg.paths.get("logs_root", "logs"), os.getenv("LOG_LEVEL", "INFO"))
    return cfg, logger


def _read_record(path: Path):
    with open(path, "r", encoding="utf-8") as f:
        return coerce_record(json.load(f))


@app.command()
def example(
    index: Optional[int] = typer.Option(
        None, help="position in the example library, random when omitted"
    ),
    config: Optional[str] = typer.Option(None, help="alternate settings.yaml"),
):
    """Print a flat form record built from the example library."""
    _, logger = _bootstrap(config)
    try:
        example_record = get_example(index)
    except LookupError as ex:
        logger.error(str(ex))
        raise typer.Exit(code=2)
    record = to_flat_record(example_record)
    logger.info(f"Example loaded: patient={record.patient_id} ndc={record.medication_ndc}")
    typer.echo(json.dumps(record.to_form(), indent=2))


@app.command("validate")
def validate_cmd(
    path: Path = typer.Argument(..., help="JSON file with the form record"),
    config: Optional[str] = typer.Option(None),
):
    """Print field errors; exit code 1 when the record is not submittable."""
    _, logger = _bootstrap(config)
    try:
        errors = validate(_read_record(path))
    except IntakeError as ex:
        logger.error(f"{ex.code}: {ex.message} {ex.detail or ''}")
        raise typer.Exit(code=2)
    typer.echo(json.dumps(errors, indent=2))
    if errors:
        logger.warning(f"{len(errors)} field(s) failed validation")
        raise typer.Exit(code=1)


@app.command("encode")
def encode_cmd(
    path: Path = typer.Argument(..., help="JSON file with the form record"),
    force: bool = typer.Option(False, help="encode even if validation fails"),
    config: Optional[str] = typer.Option(None),
):
    """Validate then print the wire message."""
    cfg, logger = _bootstrap(config)
    try:
        record = _read_record(path)
    except IntakeError as ex:
        logger.error(f"{ex.code}: {ex.message} {ex.detail or ''}")
        raise typer.Exit(code=2)

    errors = validate(record)
    if errors and not force:
        typer.echo(json.dumps(errors, indent=2))
        logger.warning("Record not encoded, fix the errors or pass --force")
        raise typer.Exit(code=1)

    xml = encode(record, datetime.now(timezone.utc), defaults=cfg.defaults)
    typer.echo(xml)


if __name__ == "__main__":
    app()
