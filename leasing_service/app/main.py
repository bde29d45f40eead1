import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import Base, leasing_engine
from shared.helpers.exception_handler import setup_exception_handlers
from .models.leasing import activities, lease_agreements, tenants, units
from .router.leasing import leases_router, tenants_router, units_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Leasing Service API")

# Create all tables
Base.metadata.create_all(bind=leasing_engine)

# Allow requests from the React app
origins = [
    "http://localhost:8080",
    "http://127.0.0.1:8003"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
setup_exception_handlers(app)

# Include routers
app.include_router(units_router.router)
app.include_router(tenants_router.router)
app.include_router(leases_router.router)


@app.get("/api/leasing/health")
def health():
    return {"status": "healthy"}
