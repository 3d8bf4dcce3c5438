"""Production entrypoint.

  APP_ENV=production gunicorn -w 2 -b 0.0.0.0:8000 wsgi:app

Workers share nothing in memory; round and balance serialization across
workers relies on the database row locks, so run them against PostgreSQL.
"""

from dead_pigeons import create_app

app = create_app()
