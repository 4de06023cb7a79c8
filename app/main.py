import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import config
from app.config import setup_logging, get_cors_settings
from app.api import routes_auth, routes_progress
from app.db.database import engine, init_models


setup_logging()
logger = logging.getLogger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if config.uses_default_secret():
        logger.warning("JWT_SECRET is not set, sessions are signed with the placeholder secret")
    if config.CREATE_TABLES:
        await init_models()
        logger.info("Database initialized")
    yield
    await engine.dispose()


app = FastAPI(title="Learning Platform API", lifespan=lifespan)

# CORS
app.add_middleware(CORSMiddleware, **get_cors_settings())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else first.get("msg")
    else:
        message = "Invalid request"
    logger.warning(f"Validation failed on {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"detail": message})


# Роуты
app.include_router(routes_auth.router, prefix="/api")
app.include_router(routes_progress.router, prefix="/api")


@app.get("/api/test")
async def test():
    return {"message": "API is working!"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
