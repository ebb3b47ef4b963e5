from fastapi import APIRouter

from school_admin.modules.academics import router as academics_router
from school_admin.modules.auth import router as auth_router
from school_admin.modules.enrollments import router as enrollments_router
from school_admin.modules.saft import router as saft_router
from school_admin.modules.staff import router as staff_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])

api_router.include_router(academics_router, prefix="/academics", tags=["Academics"])

api_router.include_router(staff_router, prefix="/staff", tags=["Staff"])

api_router.include_router(enrollments_router, prefix="/enrollments", tags=["Enrollments"])

api_router.include_router(saft_router, prefix="/saft", tags=["SAFT"])
