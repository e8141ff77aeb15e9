import os

from retailpos import create_app, db

config_name = os.environ.get('FLASK_ENV', 'production')
app = create_app(config_name)

# Tables are created on startup; the demo catalog is opt-in
with app.app_context():
    db.create_all()
    if os.environ.get('SEED_DEMO', 'False').lower() == 'true':
        from retailpos.catalog.seed import seed_demo_catalog
        seed_demo_catalog()

if __name__ == "__main__":
    app.run()
