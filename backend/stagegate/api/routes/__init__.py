from fastapi import APIRouter

from stagegate.api.routes import approvals, documents, health, history, stages, transitions

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(stages.router, prefix="/stages", tags=["stages"])
api_router.include_router(transitions.router, prefix="/projects", tags=["transitions"])
api_router.include_router(documents.router, prefix="/projects", tags=["documents"])
api_router.include_router(approvals.router, prefix="/projects", tags=["approvals"])
api_router.include_router(history.router, tags=["history"])
