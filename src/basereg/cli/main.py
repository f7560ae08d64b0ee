"""basereg CLI -- register a Basename from the command line.

Thin wrapper around the Registrar using click.  The wallet key comes
from ``WALLET_KEY`` (a ``.env`` file in the working directory is
loaded first).
"""

from __future__ import annotations

import logging

import click
from dotenv import find_dotenv, load_dotenv

from basereg.protocol import RegistrarError, ReportError, format_ether, tx_url, wallet_url
from basereg.protocol.models import PriceQuote
from basereg.sdk.config import RegistrarConfig
from basereg.sdk.registrar import Registrar, RegistrationResult, RegistrationState

_AFFIRMATIVE = {"y", "yes"}

EPILOG = """\b
Examples:
  basereg myname 1
  basereg mybasename 2
"""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error(msg: str) -> None:
    """Print an error message to stderr and exit 1."""
    click.echo(msg, err=True)
    raise SystemExit(1)


def _print_prices(quote: PriceQuote) -> None:
    click.echo(f"Base price: {format_ether(quote.base)} ETH")
    click.echo(f"Premium: {format_ether(quote.premium)} ETH")
    click.echo(f"Total cost: {format_ether(quote.total)} ETH")


def _report_progress(result: RegistrationResult) -> None:
    """Print the console report for each state the registration enters."""
    state = result.state

    if state is RegistrationState.ALREADY_REGISTERED:
        _print_prices(result.quote)
        expires_at = result.expiry.expires_at
        if expires_at is not None:
            expires = expires_at.date().isoformat()
        else:
            expires = f"timestamp {result.expiry.expiry}"
        click.echo(f"Name expires: {expires}")
        click.echo(f"\nThis name is already registered and will expire on {expires}.")
        click.echo("You can register it after it expires, or choose a different name.")

    elif state is RegistrationState.CONFIRMING_WITH_USER:
        _print_prices(result.quote)
        click.echo("Name is available for registration")

    elif state is RegistrationState.CANCELLED:
        click.echo("Registration cancelled by user.")

    elif state is RegistrationState.FETCHING_PAYLOAD:
        click.echo("Getting transaction calldata...")

    elif state is RegistrationState.SUBMITTING:
        click.echo(f"Transaction value: {format_ether(result.payload.value)} ETH")
        click.echo(f"Gas estimate: {result.payload.gas_estimate}")
        click.echo("\nSubmitting registration transaction...")

    elif state is RegistrationState.REPORTING:
        click.echo(f"Transaction submitted: {tx_url(result.tx_hash)}")
        click.echo("Updating execution...")

    elif state is RegistrationState.DONE:
        click.echo("\nBasename registration initiated successfully!")
        click.echo(f"Transaction: {tx_url(result.tx_hash)}")
        if result.execution_id:
            click.echo(f"Execution ID: {result.execution_id}")
        click.echo("\nWait for transaction confirmation to complete registration.")


def _make_confirm(name: str, years: int):
    def confirm(quote: PriceQuote) -> bool:
        try:
            answer = click.prompt(
                f'\nDo you want to register "{name}" for {years} year(s) '
                f"at ~{format_ether(quote.total)} ETH?",
                default="",
                show_default=False,
                prompt_suffix=" (y/N): ",
            )
        except (click.Abort, EOFError):
            return False
        return answer.strip().lower() in _AFFIRMATIVE

    return confirm


# ---------------------------------------------------------------------------
# basereg NAME YEARS
# ---------------------------------------------------------------------------


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=EPILOG,
)
@click.version_option(package_name="basereg")
@click.argument("name")
@click.argument("years", type=click.IntRange(min=1))
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(name: str, years: int, verbose: bool) -> None:
    """Register the Basename NAME on Base for YEARS years.

    \b
    NAME   The basename you want to register
    YEARS  Number of years to register for
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_dotenv(find_dotenv(usecwd=True))

    try:
        registrar = Registrar(RegistrarConfig())
    except RegistrarError as exc:
        _error(f"Error: {exc}")

    click.echo(f"\nStarting basename registration for: {name}")
    click.echo(f"Duration: {years} year(s)")
    click.echo(f"Wallet: {wallet_url(registrar.wallet_address)}\n")
    click.echo("Checking pricing and availability...")

    try:
        registrar.register_sync(
            name,
            years,
            _make_confirm(name, years),
            on_state=_report_progress,
        )
    except ReportError as exc:
        _error(
            f"\nRegistration failed: {exc}\n"
            f"Transaction {exc.tx_hash} is on-chain but not recorded: {tx_url(exc.tx_hash)}"
        )
    except RegistrarError as exc:
        _error(f"\nRegistration failed: {exc}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
