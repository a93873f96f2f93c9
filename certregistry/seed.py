# seed.py
# CLI commands to create the schema and load demo data.

from datetime import date
from flask import current_app
from flask.cli import with_appcontext
import click

from certregistry.models import db, Account
from certregistry.services import directory, hash_service, registry

DEMO_INSTITUTION = "0xb1f0000000000000000000000000000000000001"
DEMO_RECIPIENT = "0xa11ce00000000000000000000000000000000002"


def seed_accounts():
    admin_address = current_app.config["ADMIN_ADDRESS"]
    accounts = [
        {'address': admin_address, 'password': 'admin_password'},
        {'address': DEMO_INSTITUTION, 'password': 'institution_password'},
    ]
    for account_data in accounts:
        if not Account.query.filter_by(address=account_data['address']).first():
            account = Account(address=account_data['address'])
            account.set_password(account_data['password'])
            db.session.add(account)
    db.session.commit()
    click.echo("Accounts seeded.")


def seed_registry():
    directory.register_institution(DEMO_INSTITUTION, "Birla Institute of Technology, Mesra", "registrar@bitmesra.ac.in")
    content_ref = hash_service.sha256_of_data({
        "recipient": DEMO_RECIPIENT,
        "name": "Priya Sharma",
        "course": "Computer Science Engineering",
    })
    token_id = registry.issue_certificate(
        DEMO_INSTITUTION, DEMO_RECIPIENT, "Priya Sharma", "Computer Science Engineering",
        "9.2 CGPA", content_ref, date(2025, 5, 20), "Degree",
    )
    click.echo(f"Demo certificate {token_id} issued with content reference {content_ref}.")


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Creates all registry tables that do not exist yet."""
    db.create_all()
    click.echo("Database tables created.")


@click.command('seed-db')
@with_appcontext
def seed_command():
    """Drops and recreates the database, then loads demo accounts and one certificate."""
    db.drop_all()
    db.create_all()
    click.echo("Database tables dropped and recreated.")

    seed_accounts()
    seed_registry()

    click.echo("Database seeding completed.")
