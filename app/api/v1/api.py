"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import auth, sessions, users

api_router = APIRouter()

# Auth (table / staff / QR login, registration, logout)
api_router.include_router(auth.router)

# Account management
api_router.include_router(users.router)

# Table occupancy
api_router.include_router(sessions.router)
