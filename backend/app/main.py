from fastapi import FastAPI
import logging
from fastapi.middleware.cors import CORSMiddleware

from . import config

app = FastAPI(title="Retail Layout Engine API",
              description="API for validating, repairing and generating retail store zone and shelf layouts",
              version="1.0.0")

# Configure logging to show info-level logs from routers and solvers
logging.basicConfig(level=getattr(logging, config.LOG_LEVEL, logging.INFO),
                    format='%(asctime)s %(levelname)s %(name)s: %(message)s')

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
async def root():
    return {"message": "Welcome to the Retail Layout Engine API"}


@app.get("/health")
async def health():
    """Health endpoint for local checks.

    Returns a small JSON with service status and available solver endpoints.
    """
    return {
        "status": "ok",
        "service": "retail-layout-engine-backend",
        "version": "1.0.0",
        "oracle_configured": bool(config.LAYOUT_ORACLE_API_KEY),
        "routes": [
            "/api/validation/validate",
            "/api/validation/drag-check",
            "/api/solvers/generate",
            "/api/solvers/resolve"
        ]
    }

# Import routers
from .routers import validation, solvers
app.include_router(validation.router, prefix="/api/validation", tags=["validation"])
app.include_router(solvers.router, prefix="/api/solvers", tags=["solvers"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("backend.app.main:app", host="0.0.0.0", port=8000, reload=True)
