"""
Registre central des routers.
- API v1: auth, users, payments, admin
- Health: health_router
"""
from fastapi import FastAPI
from seasonpass.auth.views import api_router as auth_api_router
from seasonpass.users.views import router as users_router
from seasonpass.payments import views as payments_views
from seasonpass.admin.views import router as admin_router
from seasonpass.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    """
    Agrège tous les routers de l'application.
    L'ordre n'a pas d'impact (préfixes distincts).
    """
    # API v1
    app.include_router(auth_api_router)
    app.include_router(users_router)
    app.include_router(payments_views.router)
    # Admin
    app.include_router(admin_router)
    # Health & monitoring
    app.include_router(health_router)
