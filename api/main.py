"""
FastAPI Backend dla Quiz Battle.

Endpoints:
    GET    /api/health                              - health check
    GET    /api/units                               - katalog jednostek
    GET    /api/units/{id}                          - szczegóły jednostki
    POST   /api/matches                             - nowy mecz
    GET    /api/matches/{id}                        - snapshot meczu
    POST   /api/matches/{id}/advance                - ręczne przesunięcie zegara
    POST   /api/matches/{id}/deploy                 - bilet quizu
    POST   /api/matches/{id}/quiz/{token}/answer    - odpowiedź -> deploy
    POST   /api/matches/{id}/quiz/{token}/cancel    - anulowanie quizu
    GET    /api/matches/{id}/events?since=          - log zdarzeń
    GET    /api/matches/{id}/result                 - wynik meczu
    DELETE /api/matches/{id}                        - usunięcie meczu
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from quizbattle.core.config_loader import ConfigLoader
from api.routers import units, matches


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown events."""
    # Startup
    print("🚀 Quiz Battle API starting...")
    print("🌐 Docs at http://localhost:8000/docs")
    yield
    # Shutdown
    await app.state.matches.close_all()
    print("👋 Quiz Battle API shutting down...")


def create_app(loader: ConfigLoader = None) -> FastAPI:
    """Buduje aplikację z własnym rejestrem meczów."""
    app = FastAPI(
        title="Quiz Battle API",
        description="Backend API for the quiz-driven lane battle",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.matches = matches.MatchRegistry(loader or ConfigLoader())

    # CORS - allow all origins (including file://)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API routers
    app.include_router(units.router, prefix="/api", tags=["Units"])
    app.include_router(matches.router, prefix="/api", tags=["Matches"])

    @app.get("/api/health")
    async def health():
        """API health check."""
        return {"status": "healthy", "matches": len(app.state.matches)}

    return app


app = create_app()
