from fastapi import HTTPException, Request, status

from dashboard.database import Database


def get_database(request: Request) -> Database:
    """The application's active Database, created at startup."""
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database is not configured",
        )
    return database
