from fastapi import APIRouter

from .admin import admin_router
from .courses import courses_router
from .emi import emi_router
from .health import health_router
from .payments import payments_router

router = APIRouter()

router.include_router(health_router, tags=["Health"])
router.include_router(courses_router, tags=["Courses"])
router.include_router(payments_router, tags=["Payments"])
router.include_router(emi_router, tags=["EMI"])
router.include_router(admin_router, tags=["Admin"])
