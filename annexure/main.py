import logging
from typing import (
    Any,
    Dict,
)
from fastapi import (
    FastAPI,
    Request,
)
from fastapi.middleware.cors import CORSMiddleware

from annexure import __version__
from annexure.config.settings import get_settings
from annexure.api.v1.bills import router as bills_router
from annexure.api.v1.details import router as details_router
from annexure.api.v1.documents import router as documents_router
from annexure.api.v1.report import router as report_router

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(
    description="PDF Bill Annexure Generator",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(documents_router, prefix="/api/v1/documents")
app.include_router(bills_router, prefix="/api/v1/bills")
app.include_router(details_router, prefix="/api/v1/details")
app.include_router(report_router, prefix="/api/v1/report")


@app.get("/")
async def root(request: Request):
    """Root endpoint returning basic API information."""
    return {"name": "PDF Bill Annexure Generator", "version": __version__, "status": "healthy"}


@app.get("/health")
async def health_check(request: Request) -> Dict[str, Any]:
    """Health check endpoint returning basic API information."""
    return {"status": "healthy"}
