"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, un process manager importe `seasonpass.asgi:app`
  (ex: uvicorn seasonpass.asgi:app, gunicorn -k uvicorn.workers.UvicornWorker).
- Toute la configuration FastAPI est centralisée dans seasonpass.app_setup.factory.
"""

from seasonpass.app import app

__all__ = ["app"]
