"""
Mag7 POS CLI.

Management commands for operators: schema setup, bootstrap admin, config check.
"""

import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).parent))

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="pos",
    help="Mag7 POS management CLI",
    add_completion=False,
)
console = Console()


# =============================================================================
# Database Commands
# =============================================================================

@app.command()
def init_db(
    database_url: str = typer.Option(None, "--database-url", help="Overrides DATABASE_URL"),
):
    """Create all tables that do not exist yet."""
    from pos_api.models import Base
    from pos_shared.infrastructure import db

    engine = db.init_db(database_url)
    try:
        Base.metadata.create_all(bind=engine)
    finally:
        db.close_db()

    console.print(f"[green]✓ Schema ready ({len(Base.metadata.tables)} tables)[/green]")


@app.command()
def create_admin(
    email: str = typer.Option(..., prompt=True, help="Admin email"),
    name: str = typer.Option("Administrator", help="Display name"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
):
    """Create the first admin account. Registration through the API needs one."""
    from pos_api.services.domain import StaffService
    from pos_shared.config.constants import Limits, Role
    from pos_shared.infrastructure import db
    from pos_shared.utils.exceptions import ConflictError

    if len(password) < Limits.MIN_PASSWORD_LENGTH:
        console.print(f"[red]Password must have at least {Limits.MIN_PASSWORD_LENGTH} characters[/red]")
        raise typer.Exit(1)

    db.init_db()
    try:
        with db.get_db_context() as session:
            user = StaffService(session).create_account(name, email, password, Role.ADMIN)
    except ConflictError as exc:
        console.print(f"[red]✗ {exc.detail}[/red]")
        raise typer.Exit(1)
    finally:
        db.close_db()

    console.print(f"[green]✓ Admin created: {user.email} ({user.id})[/green]")


# =============================================================================
# Configuration Commands
# =============================================================================

@app.command()
def check_config():
    """Show the effective configuration and any production problems."""
    from pos_shared.config.settings import settings

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Database", settings.database_url.split("@")[-1])
    table.add_row("JWT issuer", settings.jwt_issuer)
    table.add_row("Token lifetime (min)", str(settings.jwt_access_token_expire_minutes))
    table.add_row("Rate limiting", f"{settings.rate_limit_enabled} ({settings.login_rate_limit})")
    table.add_row("Allowed origins", settings.allowed_origins or "(development defaults)")
    console.print(table)

    errors = settings.validate_production_secrets()
    if errors:
        for error in errors:
            console.print(f"[red]✗ {error}[/red]")
        raise typer.Exit(1)

    console.print("[green]✓ Configuration OK[/green]")


if __name__ == "__main__":
    app()
