"""
V1 API router aggregator: wires all endpoint modules together.
"""

from fastapi import APIRouter

from ems.api.v1.endpoints import (attendance, auth, departments, employees,
                                  health, leaves, salaries)

api_router = APIRouter()

# Login, tokens and the caller's own profile
api_router.include_router(auth.router)

# Organisation
api_router.include_router(employees.router)
api_router.include_router(departments.router)

# Day-to-day HR records
api_router.include_router(attendance.router)
api_router.include_router(leaves.router)
api_router.include_router(salaries.router)

api_router.include_router(health.router)
