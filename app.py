from flask import Flask
from config import Config
from routes import health_bp, slots_bp, booking_bp, admin_bp

from models import db
from flask_migrate import Migrate
from utils.logging_setup import configure_logging


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    configure_logging(app)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(slots_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(admin_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp


    register_cli(app)


    return app

#-------------------------
import click
from services.schedule import generate_slots, set_slot_status
from utils.timeutils import parse_day

def register_cli(app):
    @app.cli.command("generate-slots")
    @click.argument("start_date")
    @click.option("--days", default=1, show_default=True, help="Number of days to generate.")
    def generate_slots_command(start_date, days):
        """Create the daily slot schedule starting at START_DATE (YYYY-MM-DD)."""
        try:
            created = generate_slots(parse_day(start_date), days)
        except ValueError as exc:
            raise click.BadParameter(str(exc))
        click.echo(f"{created} slots created")

    @app.cli.command("slot-status")
    @click.argument("slot_id", type=int)
    @click.argument("status", type=click.Choice(["AVAILABLE", "MAINTENANCE"], case_sensitive=False))
    def slot_status_command(slot_id, status):
        """Put a slot in or out of MAINTENANCE."""
        slot = set_slot_status(slot_id, status)
        if not slot:
            click.echo("Slot not found")
            return
        click.echo(f"slot {slot.id} is now {slot.status}")

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
