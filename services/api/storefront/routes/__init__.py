"""API routes."""

from fastapi import APIRouter

from storefront.routes import admin, auth, cart, orders, scrape, ui, wheel

api_router = APIRouter()

# UI endpoints (Home bootstrap)
api_router.include_router(ui.router, prefix="/v1/ui", tags=["ui"])

# Storefront API
api_router.include_router(orders.router, prefix="/api/orders", tags=["orders"])
api_router.include_router(scrape.router, prefix="/api/scrape-and-import", tags=["import"])
api_router.include_router(cart.router, prefix="/api/cart", tags=["cart"])
api_router.include_router(wheel.router, prefix="/api/wheel", tags=["wheel"])
api_router.include_router(auth.router, prefix="/api/auth", tags=["auth"])

# Admin endpoints (diagnostics)
api_router.include_router(admin.router, prefix="/v1/admin", tags=["admin"])
