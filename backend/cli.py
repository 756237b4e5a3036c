"""CLI tools for IdeaForge administration."""

import click
from dotenv import load_dotenv

load_dotenv()

from backend.database import SessionLocal, init_db
from backend.models import Role
from backend.services.accounts import assign_role, find_by_email
from ideaengine.errors import IdeaForgeError


@click.group()
def cli():
    """IdeaForge CLI tools."""
    pass


@cli.command("init-db")
def init_db_command():
    """Create all database tables."""
    init_db()
    click.echo("Database tables created/verified")


@cli.command("set-role")
@click.option("--email", required=True, help="Email address of the account")
@click.option("--role", required=True, type=click.Choice([r.value for r in Role]), help="Role to grant")
def set_role(email: str, role: str):
    """
    Grant a role to an existing user.

    This is how the first administrator is created.

    Example:
        python -m backend.cli set-role --email admin@example.com --role admin
    """
    db = SessionLocal()
    try:
        user = find_by_email(db, email)
        if not user:
            raise click.ClickException(f"No user registered with {email}")
        try:
            user = assign_role(db, user.id, role)
        except IdeaForgeError as e:
            raise click.ClickException(e.message)
        click.echo(f"{user.email} is now {user.role}")
    finally:
        db.close()


if __name__ == "__main__":
    cli()
