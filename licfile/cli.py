"""
Command-line interface for licfile.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from licfile.common.config import Config
from licfile.common.entities import Account, License
from licfile.common.exceptions import CheckoutError, VerificationError
from licfile.common.models import ResourceObject
from licfile.issuer.checkout import LicenseCheckoutService
from licfile.verifier.verifier import LicenseFileVerifier


def _load_config(keys_dir: str | None) -> Config:
    return Config(keys_dir=Path(keys_dir) if keys_dir else None)


def _log_level(config: Config, verbose: bool) -> int:  # noqa: FBT001
    return config.LOG_LEVEL if verbose else logging.WARNING


def _related(value: Any) -> ResourceObject | list[ResourceObject] | None:
    if value is None:
        return None
    if isinstance(value, list):
        return [ResourceObject.model_validate(item) for item in value]
    return ResourceObject.model_validate(value)


def load_license(path: Path) -> License:
    """Load a license description from a JSON file."""
    try:
        raw = json.loads(path.read_text())
        return License(
            id=str(raw["id"]),
            key=raw.get("key"),
            scheme=raw.get("scheme"),
            attributes=raw.get("attributes") or {},
            relationships={
                name: _related(value)
                for name, value in (raw.get("relationships") or {}).items()
            },
        )
    except (KeyError, TypeError, ValueError, ValidationError) as err:
        msg = f"Invalid license description {path}: {err}"
        raise click.ClickException(msg) from err


def _parse_ttl(value: str | None) -> Any:
    if value is None:
        return None
    if value.lower() in ("none", "never"):
        return None
    try:
        return int(value)
    except ValueError as err:
        msg = f"TTL must be a number of seconds or 'none', got {value!r}"
        raise click.BadParameter(msg) from err


@click.group()
def cli() -> None:
    """Offline license file tools"""


@cli.command()
@click.argument("license_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--keys-dir",
    default=None,
    help="Directory to load account keys from (default: LICFILE_KEYS_DIR)",
)
@click.option("--account-id", default="default", help="Account id for logging")
@click.option(
    "--include",
    "include",
    multiple=True,
    help="Relationship to embed in the license file (repeatable)",
)
@click.option(
    "--ttl",
    default=None,
    help="Validity in seconds, or 'none' for no expiry (default: 1 month)",
)
@click.option("--encrypt", is_flag=True, help="Encrypt the payload with the license key")
@click.option("-v", "--verbose", is_flag=True, help="Log checkout details")
@click.option(
    "--out",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the license file here instead of stdout",
)
def checkout(  # noqa: PLR0913
    license_file: Path,
    keys_dir: str | None,
    account_id: str,
    include: tuple[str, ...],
    ttl: str | None,
    encrypt: bool,  # noqa: FBT001
    verbose: bool,  # noqa: FBT001
    out: Path | None,
) -> None:
    """Check out a signed license file"""
    config = _load_config(keys_dir)
    try:
        identity = config.get_signing_identity()
    except ValueError as err:
        raise click.ClickException(str(err)) from err

    lic = load_license(license_file)
    service = LicenseCheckoutService(config=config, log_level=_log_level(config, verbose))
    kwargs: dict[str, Any] = {"include": list(include), "encrypt": encrypt}
    if ttl is not None:
        kwargs["ttl"] = _parse_ttl(ttl)

    try:
        text = service.checkout(Account(id=account_id, identity=identity), lic, **kwargs)
    except CheckoutError as err:
        msg = f"{type(err).__name__}: {err}"
        raise click.ClickException(msg) from err

    if out is None:
        click.echo(text, nl=False)
    else:
        out.write_text(text)
        click.echo(f"License file written to {out}")


@cli.command()
@click.argument("license_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--keys-dir",
    default=None,
    help="Directory to load account keys from (default: LICFILE_KEYS_DIR)",
)
@click.option("--secret", default=None, help="License key for encrypted license files")
@click.option("-v", "--verbose", is_flag=True, help="Log verification details")
def verify(
    license_file: Path,
    keys_dir: str | None,
    secret: str | None,
    verbose: bool,  # noqa: FBT001
) -> None:
    """Verify a license file and print its payload"""
    config = _load_config(keys_dir)
    try:
        identity = config.get_signing_identity()
    except ValueError as err:
        raise click.ClickException(str(err)) from err

    verifier = LicenseFileVerifier(
        identity, secret=secret, log_level=_log_level(config, verbose)
    )
    try:
        result = verifier.verify(license_file.read_text())
    except (VerificationError, CheckoutError) as err:
        msg = f"{type(err).__name__}: {err}"
        raise click.ClickException(msg) from err

    click.echo(f"Status: {result.status.value}")
    click.echo(f"Algorithm: {result.alg}")
    click.echo(json.dumps(result.envelope.to_dict(), indent=2))


if __name__ == "__main__":
    cli()
