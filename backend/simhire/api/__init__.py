from fastapi import APIRouter
from simhire.api import applications, dashboard, internship_applications, internships, jobs, simulasi

api_router = APIRouter(prefix="/api")
api_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
api_router.include_router(applications.router, prefix="/applications", tags=["applications"])
api_router.include_router(internships.router, prefix="/internships", tags=["internships"])
api_router.include_router(
    internship_applications.router,
    prefix="/internship-applications",
    tags=["internship-applications"],
)
api_router.include_router(simulasi.router, prefix="/simulasi", tags=["simulasi"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
