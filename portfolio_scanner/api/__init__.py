"""API router for v1 endpoints."""

from fastapi import APIRouter

from portfolio_scanner.api import portfolio

router = APIRouter()

# Portfolio, dimension and entry scoring routes
router.include_router(portfolio.router, tags=["portfolio"])
