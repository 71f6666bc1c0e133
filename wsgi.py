"""
Flask / Flask-Migrate entry point for the desktop shell's backend process.

Usage:
    flask --app wsgi run            # serve the command API
    flask --app wsgi seed-baseline  # ensure the baseline scenario exists
    flask --app wsgi db init        # first time only (creates migrations/)
    flask --app wsgi db migrate -m "description"
    flask --app wsgi db upgrade
"""

from planner import create_app

app = create_app()
