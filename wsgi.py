"""WSGI entrypoint for Gunicorn.

Usage:
  gunicorn -w 1 -b 0.0.0.0:9050 wsgi:app

Keep a single worker: each worker process runs its own scheduler and holds
its own block state.
"""

from loterias import create_app, start_scheduler

app = create_app()
start_scheduler(app)
