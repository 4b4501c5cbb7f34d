"""FastAPI application entry point"""

import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse

# Load environment variables
load_dotenv()

from api_server.context import AppContext
from api_server.errors import setup_error_handlers
from api_server.middleware import setup_cors, setup_rate_limit, setup_logging, LoggingMiddleware
from api_server.routes import (
    health_router,
    auth_router,
    debate_router,
    leaderboard_router,
    media_router,
)

logger = setup_logging()


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """Build the API app

    Args:
        context: Services to use. When omitted they are built from the
            environment on the first request.
    """
    app = FastAPI(
        title="Debate Practice API",
        description="Local backend for debate practice against an AI opponent",
        version="1.0.0",
    )
    app.state.context = context

    setup_cors(app)
    setup_rate_limit(app)
    setup_error_handlers(app)
    app.add_middleware(LoggingMiddleware)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(debate_router)
    app.include_router(leaderboard_router)
    app.include_router(media_router)

    # Serve the built front-end when present
    web_dir = Path(__file__).parent.parent / "web"
    if web_dir.exists():
        app.mount("/static", StaticFiles(directory=str(web_dir)), name="static")

        @app.get("/")
        async def serve_index():
            """Serve the main frontend page"""
            index_path = web_dir / "index.html"
            if index_path.exists():
                return FileResponse(str(index_path))
            return {"message": "Frontend not found. Access /docs for API documentation."}
    else:
        @app.get("/")
        async def root():
            """Root endpoint when no frontend is present"""
            return {
                "message": "Debate Practice API",
                "docs": "/docs",
                "health": "/health",
            }

    return app


app = create_app()


def run() -> None:
    import uvicorn

    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))

    uvicorn.run("api_server.main:app", host=host, port=port)


if __name__ == "__main__":
    run()
