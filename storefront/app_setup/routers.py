"""
Registre central des routers (API storefront, health).
"""
from fastapi import FastAPI
from storefront.web import views as storefront_views
from storefront.health.router import router as health_router


def register_routers(app: FastAPI) -> None:
    app.include_router(storefront_views.router)
    # Health & monitoring
    app.include_router(health_router)
