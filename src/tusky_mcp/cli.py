"""Tusky MCP command line interface."""

import asyncio

from dotenv import load_dotenv
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

app = typer.Typer(name="tusky-mcp", help="Tusky MCP Server - wallet-authenticated Tusky storage")
console = Console()


def run_async(coro):
    """Run async function in sync context."""
    return asyncio.run(coro)


@app.callback()
def main():
    """Load a .env file before any command runs."""
    load_dotenv()


# ============================================================
# Server Commands
# ============================================================

@app.command()
def serve():
    """Run the MCP server over stdio."""
    from .server import main as run_server

    run_server()


@app.command()
def config():
    """Show the effective configuration."""
    from .config import get_settings
    from .models import is_valid_api_key_format

    settings = get_settings()

    table = Table(title="Tusky MCP Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    if settings.api_key:
        key_status = "set" if is_valid_api_key_format(settings.api_key) else "[yellow]set (unexpected format)[/]"
    else:
        key_status = "[dim]not set[/]"

    table.add_row("API URL", settings.api_url)
    table.add_row("API key", key_status)
    table.add_row("Request timeout", f"{settings.request_timeout:.1f}s")
    table.add_row("Nonce history", str(settings.nonce_history_size))
    table.add_row("Log level", settings.log_level)

    console.print(table)


# ============================================================
# Authentication Commands
# ============================================================

@app.command()
def challenge(wallet_address: str = typer.Argument(..., help="Wallet address (0x + 40 hex chars)")):
    """Request an authentication challenge for a wallet."""
    from .auth import AuthService
    from .config import get_settings
    from .results import Err
    from .server import create_backend
    from .session import SessionTokenStore

    async def _challenge():
        backend = create_backend(get_settings())
        try:
            result = await AuthService(backend, SessionTokenStore()).create_challenge(wallet_address)
        finally:
            await backend.close()

        if isinstance(result, Err):
            console.print(f"[bold red]{result.kind}:[/] {result.message}")
            raise typer.Exit(code=1)

        issued = result.value
        panel = Panel(
            f"""[bold]Wallet:[/] {issued.wallet_address}
[bold]Nonce:[/] {issued.nonce}
[bold]Issued:[/] {issued.issued_at.isoformat() if issued.issued_at else "-"}
[bold]Expires in:[/] {issued.expires_in_seconds if issued.expires_in_seconds is not None else "-"} seconds""",
            title="[green]Challenge Issued[/]",
        )
        console.print(panel)
        console.print("Sign the nonce with your wallet, then call tusky_verify_challenge.")

    run_async(_challenge())


if __name__ == "__main__":
    app()
