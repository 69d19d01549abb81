import logging
from typing import Tuple

import click
from eth_utils import encode_hex

from .adapters import EVMAssetRegistry
from .client import SaleTermsSigner, preflight_purchase
from .config import get_settings
from .errors import SettlementError
from .prefix import compose_asset_id, derive_prefix, asset_id_prefix, is_asset_id_bound_to
from .types import SaleTerms
from .utils import validate_address, normalize_address, is_uint256


def _address(ctx, param, value):
    if not validate_address(value):
        raise click.BadParameter(f"{value!r} is not an address")
    return normalize_address(value)


def _payee(ctx, param, values) -> Tuple[Tuple[str, int], ...]:
    payees = []
    for value in values:
        recipient, sep, amount = value.rpartition(":")
        if not sep or not validate_address(recipient) or not amount.isdigit():
            raise click.BadParameter(f"{value!r} is not ADDRESS:AMOUNT")
        payees.append((normalize_address(recipient), int(amount)))
    return tuple(payees)


def _terms(registry: str, asset_id: int, engine: str, payees, is_preexisting: bool = False) -> SaleTerms:
    if not is_uint256(asset_id):
        raise click.BadParameter(f"{asset_id} is not a uint256", param_hint="ASSET_ID")
    return SaleTerms(
        asset_registry_id=registry,
        asset_id=asset_id,
        settlement_context_id=engine,
        recipients=tuple(recipient for recipient, _ in payees),
        amounts=tuple(amount for _, amount in payees),
        is_preexisting=is_preexisting,
    )


# --- CLI Commands ---
@click.group()
@click.pass_context
def cli(ctx):
    """Tools for preparing PlatformQ asset sales."""
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@click.argument("address", callback=_address)
def prefix(address: str):
    """Prints the asset id prefix owned by ADDRESS."""
    click.echo(derive_prefix(address))


@cli.command("compose-id")
@click.argument("address", callback=_address)
@click.argument("suffix", type=click.IntRange(min=0))
def compose_id(address: str, suffix: int):
    """Builds an asset id that ADDRESS may sell before it exists."""
    try:
        click.echo(compose_asset_id(address, suffix))
    except ValueError as e:
        raise click.ClickException(str(e))


@cli.command("check-id")
@click.argument("asset_id", type=int)
@click.argument("address", callback=_address)
@click.pass_context
def check_id(ctx, asset_id: int, address: str):
    """Reports whether ASSET_ID carries the prefix of ADDRESS."""
    if is_asset_id_bound_to(asset_id, address):
        click.echo(f"Asset {asset_id} is bound to {address}")
    else:
        click.echo(
            f"Asset {asset_id} is not bound to {address} "
            f"(id prefix {asset_id_prefix(asset_id) or '<none>'}, expected {derive_prefix(address)})"
        )
        ctx.exit(1)


@cli.command()
@click.argument("registry", callback=_address)
@click.argument("asset_id", type=int)
@click.argument("engine", callback=_address)
@click.option("--payee", "payees", multiple=True, required=True, callback=_payee,
              help="Payment recipient as ADDRESS:AMOUNT (wei). Repeat for each recipient.")
@click.pass_context
def sign(ctx, registry: str, asset_id: int, engine: str, payees):
    """Signs sale terms with SETTLEMENT_SIGNER_PRIVATE_KEY."""
    settings = ctx.obj["settings"]
    if settings.signer_private_key is None:
        raise click.ClickException("SETTLEMENT_SIGNER_PRIVATE_KEY is not set")
    terms = _terms(registry, asset_id, engine, payees)
    try:
        signer = SaleTermsSigner(settings.signer_private_key.get_secret_value())
    except ValueError as e:
        raise click.ClickException(str(e))

    click.echo(f"Signer: {signer.address}", err=True)
    click.echo(encode_hex(signer.sign(terms)))


@cli.command()
@click.argument("asset_id", type=int)
@click.argument("buyer", callback=_address)
@click.option("--payee", "payees", multiple=True, required=True, callback=_payee,
              help="Payment recipient as ADDRESS:AMOUNT (wei). Repeat for each recipient.")
@click.option("--creator-signature", required=True, help="Hex signature of the creator.")
@click.option("--authority-signature", required=True, help="Hex signature of the trusted authority.")
@click.option("--value", type=click.IntRange(min=0), default=None,
              help="Attached value in wei. Defaults to the distribution total.")
@click.option("--preexisting/--deferred", default=True,
              help="Buy an existing asset, or one created at sale time.")
@click.pass_context
def preflight(ctx, asset_id: int, buyer: str, payees, creator_signature: str,
              authority_signature: str, value, preexisting: bool):
    """Checks a purchase against the deployed registry without sending it."""
    settings = ctx.obj["settings"]
    missing = [
        f"SETTLEMENT_{name.upper()}"
        for name in ("registry_address", "engine_address", "trusted_authority")
        if not getattr(settings, name)
    ]
    if missing:
        raise click.ClickException(f"Missing settings: {', '.join(missing)}")

    try:
        registry = EVMAssetRegistry.connect(settings.rpc_url, settings.registry_address, settings.chain_id)
    except ConnectionError as e:
        raise click.ClickException(str(e))

    terms = _terms(registry.address, asset_id, normalize_address(settings.engine_address),
                   payees, is_preexisting=preexisting)
    if value is None:
        value = sum(terms.amounts)

    try:
        creator = preflight_purchase(registry, terms, creator_signature, authority_signature,
                                     settings.trusted_authority, buyer, value)
    except SettlementError as e:
        raise click.ClickException(str(e))

    click.echo(f"Purchase of asset {asset_id} by {buyer} would settle (creator {creator})")


if __name__ == '__main__':
    cli()
