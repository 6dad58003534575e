"""
Main API router for version 1 of the MBC Tracker API.

Aggregates all endpoint routers for this version.
"""

from fastapi import APIRouter

from mbc_tracker.presentation.api.v1.endpoints.compliance import router as compliance_router
from mbc_tracker.presentation.api.v1.endpoints.instances import router as instances_router
from mbc_tracker.presentation.api.v1.endpoints.ops import router as ops_router
from mbc_tracker.presentation.api.v1.endpoints.patients import router as patients_router
from mbc_tracker.presentation.api.v1.endpoints.questionnaire import router as questionnaire_router

api_v1_router = APIRouter()

# Scheduled job triggers (bearer CRON_SECRET when configured)
api_v1_router.include_router(ops_router, prefix="/ops", tags=["Operations"])

# Patient-facing magic links
api_v1_router.include_router(questionnaire_router, prefix="/questionnaire", tags=["Questionnaire"])

api_v1_router.include_router(instances_router, prefix="/instances", tags=["Assessment Instances"])
api_v1_router.include_router(compliance_router, prefix="/compliance", tags=["Compliance"])
api_v1_router.include_router(patients_router, prefix="/patients", tags=["Patients"])
