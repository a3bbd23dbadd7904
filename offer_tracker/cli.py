"""CLI tools for tracker administration."""

from pathlib import Path
from uuid import UUID

import click

from offer_tracker.core.catalog import CatalogError, load_catalog
from offer_tracker.core.config import settings
from offer_tracker.core.security import create_session_token
from offer_tracker.db.enums import IdentityKind
from offer_tracker.db.models import Instructor, User
from offer_tracker.db.session import SessionLocal
from offer_tracker.services import partnership_service


@click.group()
def cli():
    """Offer tracker CLI tools."""
    pass


@cli.command()
@click.option("--catalog", "catalog_path", default=None, help="Path to partnerships JSON (defaults to settings)")
@click.option("--max-users", default=None, type=int, help="Capacity for newly created partnerships")
def sync_partnerships(catalog_path: str | None, max_users: int | None):
    """
    Upsert catalog partnerships into the database.

    Existing rows keep their capacity and active counts. Rows missing from
    the catalog are deactivated.

    Example:
        python -m offer_tracker.cli sync-partnerships --max-users 5
    """
    try:
        catalog = load_catalog(catalog_path) if catalog_path else None
    except (OSError, CatalogError) as e:
        click.echo(f"❌ Could not load catalog: {e}")
        return

    if catalog_path and Path(catalog_path).resolve() != Path(settings.PARTNERSHIP_CATALOG_PATH).resolve():
        click.echo(f"⚠ {catalog_path} is not the catalog the API serves ({settings.PARTNERSHIP_CATALOG_PATH})")
        click.echo("  Partnerships it defines cannot be started until PARTNERSHIP_CATALOG_PATH points at it")

    db = SessionLocal()
    try:
        created, updated, deactivated = partnership_service.sync_catalog(
            db, catalog, default_max_users=max_users
        )
        click.echo(
            f"✓ Partnerships synced: {created} created, {updated} updated, {deactivated} deactivated"
        )
    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


@cli.command()
@click.option("--email", required=True, help="User email address")
@click.option("--name", default=None, help="Display name")
def create_user(email: str, name: str | None):
    """
    Create a tracked user.

    Example:
        python -m offer_tracker.cli create-user --email "ada@example.com" --name "Ada"
    """
    db = SessionLocal()
    try:
        email = email.lower().strip()
        if db.query(User).filter(User.email == email).first():
            click.echo(f"❌ User already exists: {email}")
            return

        user = User(email=email, name=name)
        db.add(user)
        db.commit()
        click.echo(f"✓ Created user {email}")
        click.echo(f"  ID: {user.id}")
    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


@cli.command()
@click.option("--username", required=True, help="Instructor username")
def create_instructor(username: str):
    """Create an instructor account."""
    db = SessionLocal()
    try:
        username = username.strip()
        if db.query(Instructor).filter(Instructor.username == username).first():
            click.echo(f"❌ Instructor already exists: {username}")
            return

        instructor = Instructor(username=username)
        db.add(instructor)
        db.commit()
        click.echo(f"✓ Created instructor {username}")
        click.echo(f"  ID: {instructor.id}")
    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


@cli.command()
@click.option("--id", "subject_id", required=True, help="User or instructor ID")
@click.option(
    "--kind",
    type=click.Choice([k.value for k in IdentityKind]),
    default=IdentityKind.USER.value,
    show_default=True,
)
def issue_token(subject_id: str, kind: str):
    """
    Print a session token for local testing.

    Send it as the tracker_session (user) or instructor_session cookie.
    """
    try:
        parsed = UUID(subject_id)
    except ValueError:
        click.echo(f"❌ Not a valid ID: {subject_id}")
        return

    db = SessionLocal()
    try:
        model = Instructor if kind == IdentityKind.INSTRUCTOR.value else User
        if db.get(model, parsed) is None:
            click.echo(f"❌ No {kind} with ID {subject_id}")
            return
    finally:
        db.close()

    click.echo(create_session_token(parsed, kind))


if __name__ == "__main__":
    cli()
