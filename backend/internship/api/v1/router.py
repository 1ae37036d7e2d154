from fastapi import APIRouter
from internship.api.v1.endpoints import health, submissions

api_router = APIRouter()

# Liveness/readiness probes (/health/live, /health/ready)
api_router.include_router(health.router)

# Submission workflow, student profile and undertaking download
api_router.include_router(submissions.router)
