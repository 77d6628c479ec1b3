"""
FitAI Analytics Service
FastAPI application for training analytics and recommendations

Run with: uvicorn fitai_analytics.main:app --reload --port 8000
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import settings
from .exceptions import InsufficientDataError, RoutineValidationError
from .logging_config import configure_logging
from .routers import analytics_router, recommendations_router, routines_router

configure_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="FitAI Analytics",
    description="""
    ## Training Analytics & Recommendations

    ### Analytics
    - **Plateau Prediction**: Which exercises are about to stall
    - **Volume Recommendation**: Next training volume from recovery and adaptation
    - **Injury Risk**: Load, intensity, recovery and movement quality
    - **Training Stress**: Per-session stress score with moving average
    - **1RM Estimation**: Epley, Brzycki and Lombardi

    ### Recommendations
    - **Exercise Substitutions**: Alternatives that respect constraints
    - **Workout Prescription**: Complete session from the user's profile
    - **Deload Planning**: Timing and modifications from fatigue
    - **Workout Timing**: Weekly plan on the best-performing time slots

    ### Routines
    - **Model Selection & Cost**: Chat model per subscription plan
    - **Routine Validation**: Normalize generated routines

    ---

    **Tech Stack**: Python, FastAPI, scikit-learn, pandas
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InsufficientDataError)
async def insufficient_data_handler(request: Request, exc: InsufficientDataError):
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "required": exc.required, "found": exc.found},
    )


@app.exception_handler(RoutineValidationError)
async def routine_validation_handler(request: Request, exc: RoutineValidationError):
    logger.warning("routine_rejected", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/health", tags=["Health"])
async def health_check():
    """Check if the analytics service is running"""
    return {
        "status": "healthy",
        "service": settings.service_name,
        "version": __version__
    }


app.include_router(analytics_router)
app.include_router(recommendations_router)
app.include_router(routines_router)


@app.get("/", tags=["Info"])
async def root():
    """Service information and available endpoints"""
    return {
        "service": "FitAI Analytics",
        "version": __version__,
        "documentation": "/docs",
        "endpoints": {
            "analytics": {
                "plateaus": "POST /analytics/plateaus",
                "volume": "POST /analytics/volume",
                "injury_risk": "POST /analytics/injury-risk",
                "stress": "POST /analytics/stress",
                "1rm": "POST /analytics/1rm",
                "1rm_calculator": "GET /analytics/1rm/calculate"
            },
            "recommendations": {
                "substitutions": "POST /recommendations/substitutions",
                "workout": "POST /recommendations/workout",
                "deload": "POST /recommendations/deload",
                "timing": "POST /recommendations/timing"
            },
            "routines": {
                "model": "GET /routines/model/{plan}",
                "validate": "POST /routines/validate"
            }
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("fitai_analytics.main:app", host="0.0.0.0", port=settings.port, reload=settings.is_dev)
