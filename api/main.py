from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from periodwatch import __version__
from periodwatch.exceptions import PeriodError
from periodwatch.settings import settings

from .compliance import router as compliance_router
from .periods import router as periods_router
from .test_mode import router as test_mode_router

app = FastAPI(
    title="periodwatch API",
    version=__version__,
    description="Compliance periods, overdue detection and test-mode clock for HR compliance views.",
)

# --- CORS ----------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)

# --- Include Routers ----------------------------------------------------------
app.include_router(periods_router)
app.include_router(compliance_router)
app.include_router(test_mode_router)


# ---------- error mapping ----------
@app.exception_handler(PeriodError)
async def period_error_handler(request: Request, exc: PeriodError):
    """Malformed identifiers / unknown frequencies are caller errors."""
    return JSONResponse(
        status_code=400,
        content={"detail": "unable to compute compliance status", "reason": str(exc)},
    )


# ---------- health-check ----------
@app.get("/")
def root():
    return {"status": "ok", "msg": "periodwatch API is alive"}
