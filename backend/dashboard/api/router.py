from fastapi import APIRouter

from dashboard.api import clients, connections, db, looker, performance, status

api_router = APIRouter()

api_router.include_router(status.router, tags=["Status"])
api_router.include_router(connections.router, prefix="/connections", tags=["Connections"])
api_router.include_router(db.router, prefix="/db", tags=["Schema"])
api_router.include_router(clients.router, prefix="/clients", tags=["Clients"])
api_router.include_router(performance.router, prefix="/performance-data", tags=["Performance Data"])
api_router.include_router(looker.router, prefix="/looker-data", tags=["Looker Data"])
