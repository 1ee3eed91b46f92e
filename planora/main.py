import logging
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from planora.api.routers import enrichment, plan
from planora.core.config import Settings
from planora.core.errors import PreferenceValidationError

settings = Settings.from_env()

# Configure Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("planora")
handler = RotatingFileHandler(settings.log_file, maxBytes=5 * 1024 * 1024, backupCount=3)
formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
handler.setFormatter(formatter)
logger.addHandler(handler)

app = FastAPI(title="Planora Itinerary API")

app.include_router(plan.router)
app.include_router(enrichment.router)

app.add_middleware(
    CORSMiddleware,  # type: ignore
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PreferenceValidationError)
async def preference_error_handler(request: Request, exc: PreferenceValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid trip request", "fieldErrors": exc.field_errors},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    field_errors = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        key = ".".join(loc) or "body"
        if error.get("type") == "json_invalid":
            key = "body"
        field_errors.setdefault(key, error.get("msg", "Invalid value"))
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "fieldErrors": field_errors},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"SERVER ERROR on {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": "An unexpected error occurred while generating your plan."},
    )


@app.get("/health")
def health_check():
    return {"status": "ok", "ai": plan.orchestrator.ai_client.configured}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
