"""CLI for wallet-accumulator."""

import json
import os
from enum import StrEnum
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.traceback import install

# Import all providers to trigger auto-registration
from wallet_accumulator import providers  # noqa: F401
from wallet_accumulator.core import BalanceAggregator, ProviderRegistry, Report
from wallet_accumulator.data import (
    DEFAULT_TOKENS,
    AccumulatorSettings,
    ExchangeCredentials,
    load_exchange_credentials,
    load_settings,
    load_token_config,
    load_wallets,
)
from wallet_accumulator.errors import AccumulatorError
from wallet_accumulator.export import CsvExporter
from wallet_accumulator.logger import configure_logging
from wallet_accumulator.pricing import CoinGeckoClient, PriceResolver
from wallet_accumulator.providers import (
    BaseBalanceProvider,
    BitcoinProvider,
    CexProvider,
    EvmProvider,
    SolanaProvider,
    StatementProvider,
)

# Install rich traceback handler
install(show_locals=False)

app = typer.Typer(
    name="wallet-accumulator",
    help="Aggregate token balances across wallets, exchanges, and offline statements",
    add_completion=False,
)

console = Console()

WALLETS_TEMPLATE = "# Add one wallet address per line\n0x...\n"
ENV_TEMPLATE = "# CEX API Keys\nBITFLYER_API_KEY=\nBITFLYER_API_SECRET=\n"


class OutputMode(StrEnum):
    """Output layout options."""

    TOTAL = "total"
    DETAIL = "detail"


def build_providers(
    settings: AccumulatorSettings,
    wallets: list[str],
    credentials: list[ExchangeCredentials],
    statement_path: Path | None = None,
) -> list[BaseBalanceProvider]:
    """
    Build providers in their fixed invocation order.

    Parameters
    ----------
    settings : AccumulatorSettings
        Run settings
    wallets : list[str]
        Configured wallet addresses (each provider picks its own)
    credentials : list[ExchangeCredentials]
        Enabled exchange accounts
    statement_path : Path | None
        Offline statement CSV, overriding the settings value

    Returns
    -------
    list[BaseBalanceProvider]
        EVM, Solana, Bitcoin, CEX, then the statement provider when configured

    """
    debug = settings.debug
    provider_list: list[BaseBalanceProvider] = [
        EvmProvider(wallets, debug=debug),
        SolanaProvider(wallets, rpc_url=settings.solana_rpc_url, debug=debug),
        BitcoinProvider(wallets, api_url=settings.bitcoin_api_url, debug=debug),
        CexProvider(credentials, valuation_currency=settings.valuation_currency, debug=debug),
    ]

    path = statement_path or settings.statement_path
    if path:
        console.print(f"[dim]Statement import enabled (path={path})[/dim]")
        provider_list.append(StatementProvider(path, debug=debug))

    return provider_list


@app.command()
def run(
    wallets: Path = typer.Option(Path("wallets.txt"), "--wallets", "-w", help="Wallet list file"),
    tokens: Path = typer.Option(Path("tokens.json"), "--tokens", "-t", help="Token config file (JSON or YAML)"),
    mode: OutputMode = typer.Option(OutputMode.TOTAL, "--mode", "-m", help="Output layout"),
    output: Path = typer.Option(Path("result.csv"), "--output", "-o", help="Output CSV path"),
    bitpoint_csv: Path | None = typer.Option(
        None, "--bitpoint-csv", help="BITPOINT spot CSV export (last row = current balances)"
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output"),
) -> None:
    """
    Aggregate balances and write the report as CSV.

    Examples:

        # Totals per token
        wallet-accumulator run

        # One row per wallet/exchange
        wallet-accumulator run --mode detail -o detail.csv
    """
    load_dotenv()

    provider_list: list[BaseBalanceProvider] = []
    try:
        settings = load_settings(os.environ)
        if debug:
            settings = settings.model_copy(update={"debug": True})
        configure_logging(settings.debug)

        console.print(f"\n[bold cyan]Aggregating balances[/bold cyan] (mode={mode.value})")

        token_defs = load_token_config(tokens)
        wallet_list = load_wallets(wallets)
        credentials = load_exchange_credentials(os.environ)

        provider_list = build_providers(settings, wallet_list, credentials, bitpoint_csv)
        for provider in provider_list:
            provider.validate()

        with CoinGeckoClient(settings.coingecko_api_url, api_key=settings.coingecko_api_key) as price_client:
            resolver = PriceResolver(price_client, settings.valuation_currency, debug=settings.debug)
            aggregator = BalanceAggregator(
                token_defs,
                provider_list,
                resolver,
                valuation_currency=settings.valuation_currency,
                debug=settings.debug,
            )

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task("Fetching balances and prices...", total=None)
                report = aggregator.aggregate()
                progress.update(task, description=f"✓ Aggregated {len(report.entries)} tokens")

        CsvExporter().export(report, output, mode.value)
        _output_table(report)
        console.print(f"Wrote results to [bold]{output}[/bold]")

    except AccumulatorError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    finally:
        for provider in provider_list:
            provider.close()


@app.command()
def init() -> None:
    """Write default tokens.json, wallets.txt, and .env templates if missing."""
    templates = {
        Path("tokens.json"): json.dumps({"tokens": DEFAULT_TOKENS}, indent=2) + "\n",
        Path("wallets.txt"): WALLETS_TEMPLATE,
        Path(".env"): ENV_TEMPLATE,
    }
    for path, content in templates.items():
        if path.exists():
            console.print(f"[yellow]{path} already exists[/yellow]")
            continue
        path.write_text(content, encoding="utf-8")
        console.print(f"[green]Created {path}[/green]")


@app.command()
def list_sources() -> None:
    """List all supported balance sources."""
    table = Table(title="Balance Sources", show_header=True, header_style="bold magenta")
    table.add_column("Source", style="cyan")
    table.add_column("Kind", style="yellow")
    table.add_column("Description", style="green")

    for provider_class in ProviderRegistry.get_all_providers():
        table.add_row(provider_class.name, provider_class.source_kind.value, provider_class.description)

    console.print(table)


def _output_table(report: Report) -> None:
    """Output report as rich table."""
    if not report.entries:
        console.print("\n[yellow]No balances found[/yellow]")
        return

    currency = report.valuation_currency
    table = Table(title="Balances", show_header=True, header_style="bold magenta")
    table.add_column("Token", style="cyan")
    table.add_column("Amount", style="white", justify="right")
    table.add_column(f"Price ({currency})", style="yellow", justify="right")
    table.add_column(f"Value ({currency})", style="bold green", justify="right")
    table.add_column("Sources", style="blue", justify="right")

    for entry in report.entries:
        table.add_row(
            entry.symbol,
            f"{entry.total_amount:,.8f}".rstrip("0").rstrip("."),
            f"{entry.price:,.2f}" if entry.price else "-",
            f"{entry.value:,.0f}",
            str(len(entry.details)),
        )

    console.print("\n")
    console.print(table)
    console.print(f"[bold]Total Value:[/bold] {report.total_value():,.0f} {currency}\n")


if __name__ == "__main__":
    app()
