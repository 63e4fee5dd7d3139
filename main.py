import logging
import os

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from errors import MathPracticeError

# Routers
from routers.health import router as health_router
from routers.math_problem import router as math_problem_router
from routers.progress import router as progress_router
from routers.submissions import router as submissions_router

logger = logging.getLogger("math-practice")
logging.basicConfig(level=logging.INFO)

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if o.strip()
]

app = FastAPI(title="Math Practice – Problem API")

# Allow calls from the Next.js practice UI
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MathPracticeError)
def handle_practice_error(request: Request, exc: MathPracticeError):
    return JSONResponse(
        status_code=exc.status_code, content={"success": False, "error": exc.message}
    )


@app.exception_handler(SQLAlchemyError)
def handle_db_error(request: Request, exc: SQLAlchemyError):
    logger.error("database error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=500, content={"success": False, "error": MathPracticeError.message}
    )


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    # The practice UI expects the action envelope; other routes keep FastAPI's 422
    if request.url.path.startswith("/api/"):
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": "Invalid request",
                "details": jsonable_encoder(exc.errors()),
            },
        )
    return await request_validation_exception_handler(request, exc)


@app.get("/")
def health_root():
    return {"ok": True}


app.include_router(math_problem_router)  # /api/math-problem
app.include_router(progress_router)  # /progress/...
app.include_router(submissions_router)  # /submissions/...
app.include_router(health_router)  # /health/...
