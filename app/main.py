import logging
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.gzip import GZipMiddleware
from app.api.router import api_router
from app.core.config import get_settings
from app.core.errors import AuthError, MealPlannerError, ValidationError
from app.core.logging_config import configure_logging

configure_logging()
logger = logging.getLogger("app")
settings = get_settings()

app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Generated plans are large JSON documents
app.add_middleware(GZipMiddleware, minimum_size=1024)


# ---------- Error mapping ----------
@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=ValidationError.status_code,
        content={"error": ValidationError.public_message, "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(MealPlannerError)
async def meal_planner_error_handler(request: Request, exc: MealPlannerError):
    if exc.status_code >= 500:
        logger.exception("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
        # cause stays in the logs; callers only see the generic message
        body = {"error": exc.public_message}
    else:
        logger.info("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
        body = {"error": exc.message}
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Mount only the unified API router at /api
app.include_router(api_router, prefix="/api")

@app.get("/")
async def root():
    return {
        "message": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "endpoints": {
            "docs": "/docs",
            "meal_plans": "/api/meal-plans",
            "meals": "/api/meals",
        }
    }

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=5000, reload=True)
