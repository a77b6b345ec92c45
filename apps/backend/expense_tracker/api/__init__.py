"""Router aggregation.

Each feature module owns an ``APIRouter``; ``register_routers`` mounts them
all under ``/api``.
"""

from fastapi import FastAPI

from . import categories, recurring_expenses, summary, transactions


def register_routers(app: FastAPI) -> None:
    """Attach all API routes to the FastAPI application."""

    app.include_router(categories.router, prefix="/api")
    app.include_router(transactions.router, prefix="/api")
    app.include_router(summary.router, prefix="/api")
    app.include_router(recurring_expenses.router, prefix="/api")
