"""
Developer CLI for offer rules and configuration checks.

Usage:
    python -m merchant_app.cli ladder --type percent --value 10 --min-followers 1000 --name "Cafe Roma"
    python -m merchant_app.cli validate --type percent --value 7 --start 2024-05-01
    python -m merchant_app.cli tiers
    python -m merchant_app.cli check-env
"""

import logging
import sys

import click
from rich.console import Console
from rich.table import Table

from merchant_app.config import ConfigError, Settings
from merchant_app.offers import (
    FOLLOWER_TIERS,
    BaseOffer,
    OfferConfig,
    OfferTierScaler,
    OfferValidator,
)
from merchant_app.offers.tiers import DISCOUNT_TYPES
from merchant_app.offers.titles import generate_description

logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger(__name__)

console = Console()

DISCOUNT_TYPE = click.Choice(list(DISCOUNT_TYPES), case_sensitive=False)


@click.group()
def cli():
    """Merchant offer tooling.

    Preview scaling ladders and validate offers without touching Supabase.
    """
    pass


@cli.command()
def tiers():
    """List the follower tiers."""
    table = Table(title="Follower tiers")
    table.add_column("#", justify="right")
    table.add_column("Label")
    table.add_column("Min followers", justify="right")
    for index, tier in enumerate(FOLLOWER_TIERS):
        table.add_row(str(index), tier.label, f"{tier.value:,}")
    console.print(table)


@cli.command()
@click.option("--type", "-t", "discount_type", type=DISCOUNT_TYPE, default="percent", help="Discount type")
@click.option("--value", "-v", type=int, required=True, help="Base discount value")
@click.option("--min-followers", "-f", type=int, default=1000, help="Base tier threshold")
@click.option("--name", "-n", default="My Business", help="Merchant display name")
@click.option("--currency", default="EUR", help="Currency for coupon amounts")
def ladder(discount_type: str, value: int, min_followers: int, name: str, currency: str):
    """Preview the higher-tier ladder of a base offer."""
    config = OfferConfig(require_start_date=False, currency=currency.upper())
    base = BaseOffer(discount_type=discount_type.lower(), discount_value=value, min_followers=min_followers)

    errors = OfferValidator(config).validate(base)
    if errors:
        for field, message in errors.items():
            console.print(f"[red]✗ {field}: {message}[/red]")
        sys.exit(1)

    offers = OfferTierScaler(config).compute_scaling_ladder(base, name)
    if not offers:
        console.print("[yellow]No higher tiers: the base offer is already at the top tier or not a tier.[/yellow]")
        return

    table = Table(title=f"Scaling ladder for {name}")
    table.add_column("Min followers", justify="right")
    table.add_column("Discount", justify="right")
    table.add_column("Title")
    table.add_column("Description")
    for offer in offers:
        table.add_row(
            f"{offer.min_followers:,}",
            str(offer.discount_value),
            offer.title,
            generate_description(
                base.discount_type, offer.discount_value, currency=config.currency,
                free_threshold=config.coupon_max_discount,
            ),
        )
    console.print(table)


@cli.command()
@click.option("--type", "-t", "discount_type", type=DISCOUNT_TYPE, default="percent", help="Discount type")
@click.option("--value", "-v", type=int, required=True, help="Discount value")
@click.option("--start", "start_at", default=None, help="Start date (YYYY-MM-DD)")
@click.option("--end", "end_at", default=None, help="End date (YYYY-MM-DD)")
@click.option("--require-start/--no-require-start", default=True, help="Require a start date")
def validate(discount_type: str, value: int, start_at: str, end_at: str, require_start: bool):
    """Validate a single offer."""
    config = OfferConfig(require_start_date=require_start)
    errors = OfferValidator(config).validate(
        BaseOffer(discount_type=discount_type.lower(), discount_value=value, start_at=start_at, end_at=end_at)
    )
    if not errors:
        console.print("[green]✓ Offer is valid[/green]")
        return
    for field, message in errors.items():
        console.print(f"[red]✗ {field}: {message}[/red]")
    sys.exit(1)


@cli.command("check-env")
def check_env():
    """Report missing or malformed environment configuration."""
    try:
        Settings.from_env().require_valid()
    except ConfigError as e:
        for problem in e.problems:
            console.print(f"[red]✗ {problem}[/red]")
        sys.exit(1)
    console.print("[green]✓ Environment looks good[/green]")


if __name__ == "__main__":
    cli()
