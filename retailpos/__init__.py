import click
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from config import config

db = SQLAlchemy()


def create_app(config_name='default'):
    """Application factory — creates and configures the Flask app."""
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # ── Logging ───────────────────────────────────────────────────
    from retailpos.utils.logging import setup_logging
    setup_logging(app)

    # ── Extensions ────────────────────────────────────────────────
    db.init_app(app)

    # ── Blueprints ────────────────────────────────────────────────
    from retailpos.main import main as main_blueprint
    app.register_blueprint(main_blueprint)

    from retailpos.catalog import catalog as catalog_blueprint
    app.register_blueprint(catalog_blueprint, url_prefix='/catalog')

    from retailpos.sales import sales as sales_blueprint
    app.register_blueprint(sales_blueprint, url_prefix='/sales')

    from retailpos.quotes import quotes as quotes_blueprint
    app.register_blueprint(quotes_blueprint, url_prefix='/quotes')

    # ── Error Handlers ────────────────────────────────────────────
    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({'error': getattr(e, 'description', 'Bad request'), 'code': 'bad_request'}), 400

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'error': 'Not found', 'code': 'not_found'}), 404

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({'error': 'Server error', 'code': 'server_error'}), 500

    # ── CLI Commands ──────────────────────────────────────────────
    register_commands(app)

    return app


def register_commands(app):
    """Register custom Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db():
        """Create all tables and seed this year's document sequences."""
        from datetime import date
        from retailpos.sales.models import DocumentSequence, DOCUMENT_KINDS

        db.create_all()
        click.echo('✅  Database tables created.')

        year = date.today().year
        for kind in DOCUMENT_KINDS:
            if not db.session.get(DocumentSequence, (kind, year)):
                db.session.add(DocumentSequence(kind=kind, year=year, last_seq=0))
                click.echo(f'✅  {kind} sequence seeded for {year}.')
        db.session.commit()

    @app.cli.command('show-sequences')
    def show_sequences():
        """Show current document sequence counters (diagnostic)."""
        from retailpos.sales.models import DocumentSequence, format_document_number
        rows = DocumentSequence.query.order_by(
            DocumentSequence.year.desc(), DocumentSequence.kind
        ).all()
        if not rows:
            click.echo('No sequence rows found. Run flask init-db first.')
            return
        click.echo(f'{"Kind":<12} {"Year":<8} {"Last Seq":<10} {"Next Number"}')
        click.echo('─' * 45)
        for row in rows:
            next_no = format_document_number(row.kind, row.year, row.last_seq + 1)
            click.echo(f'{row.kind:<12} {row.year:<8} {row.last_seq:<10} {next_no}')

    @app.cli.command('seed-demo')
    def seed_demo():
        """Populate the catalog with demo price lists and products."""
        from retailpos.catalog.seed import seed_demo_catalog

        click.echo("🌱 Seeding demo catalog...")
        db.create_all()
        created = seed_demo_catalog()
        click.echo(f"✅ {created} products seeded.")
