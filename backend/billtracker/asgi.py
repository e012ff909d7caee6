# billtracker/asgi.py - entry point for `uvicorn billtracker.asgi:app`
from billtracker.main import create_app

app = create_app()
