# billtracker.api.v1 - routers mounted by billtracker.main.create_app
from . import attachments, auth, bills, categories, health, notifications, reports, users

__all__ = ["attachments", "auth", "bills", "categories", "health", "notifications", "reports", "users"]
