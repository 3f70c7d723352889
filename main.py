# main.py

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.app_env import load_app_env

# ================================================================
# LOGGING (BOOT FIRST)
# ================================================================
_env = load_app_env()

logging.basicConfig(
    level=_env.log_level,
    format="%(asctime)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger("clinic-rating-backend")
logger.info("Clinic rating backend boot sequence started")

from utils.supabase_client import is_supabase_configured

# ================================================================
# ROUTERS (GUARDED IMPORTS, DO NOT BLOCK SERVER START)
# ================================================================
ratings_router = None
clinics_router = None

try:
    from ratings_api import router as ratings_router  # type: ignore
    logger.info("Ratings router loaded")
except Exception as e:
    logger.error(f"Failed to load ratings router (startup continues): {e}")

try:
    from routers.clinics import router as clinics_router  # type: ignore
    logger.info("Clinics router loaded")
except Exception as e:
    logger.error(f"Failed to load clinics router (startup continues): {e}")

# ================================================================
# FASTAPI APP
# ================================================================
app = FastAPI(
    title="Clinic Rating Backend",
    description="Dental clinic directory • D-Score ratings • Ranked listings",
    version="1.0.0",
)

# ================================================================
# CORS
# ================================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=_env.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ================================================================
# ROOT / HEALTH
# ================================================================
@app.get("/")
def root():
    return {
        "message": "Clinic Rating Engine Online",
        "supabase_configured": is_supabase_configured(),
        "ratings_router_loaded": bool(ratings_router),
        "clinics_router_loaded": bool(clinics_router),
    }


@app.get("/healthz", include_in_schema=False)
def healthz():
    return {"status": "healthy"}


# ================================================================
# ROUTERS
# ================================================================
if ratings_router:
    app.include_router(ratings_router)

if clinics_router:
    app.include_router(clinics_router)


# ================================================================
# LIFECYCLE
# ================================================================
@app.on_event("startup")
def startup_event():
    logger.info("Clinic rating backend started.")


@app.on_event("shutdown")
def shutdown_event():
    logger.info("Clinic rating backend stopped.")
