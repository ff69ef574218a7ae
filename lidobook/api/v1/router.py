from fastapi import APIRouter
from lidobook.api.v1 import resources, reservations, payments

api_router = APIRouter()

api_router.include_router(resources.router, prefix="/resources", tags=["resources"])
api_router.include_router(reservations.router, prefix="/reservations", tags=["reservations"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
