import secrets

import click
from flask import current_app
from flask.cli import with_appcontext

from clinic.extensions import db
from clinic.models.user_models import Role, User

DEFAULT_ADMIN_USERNAME = 'admin'


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create the database tables and the default admin account."""
    db.create_all()

    if User.query.filter_by(username=DEFAULT_ADMIN_USERNAME).first():
        click.echo("Database initialized. Admin account already exists.")
        return

    password = current_app.config.get('DEFAULT_ADMIN_PASSWORD')
    generated = not password
    if generated:
        password = secrets.token_urlsafe(12)

    admin = User(username=DEFAULT_ADMIN_USERNAME, role=Role.ADMIN)
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()

    click.echo(f"Database initialized. Created '{DEFAULT_ADMIN_USERNAME}' account.")
    if generated:
        click.echo(f"Generated admin password: {password}")
        click.echo("Please log in and change this password immediately.")


def register_commands(app):
    app.cli.add_command(init_db_command)
