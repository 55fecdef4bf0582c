"""FastAPI routers acting as controllers in the MVC architecture."""

from . import admin, auth, donations, food_items, reports, schools, users

__all__ = ["admin", "auth", "donations", "food_items", "reports", "schools", "users"]
