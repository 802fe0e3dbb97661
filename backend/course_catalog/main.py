import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

from course_catalog.core import config
from course_catalog.core.database import Database
from course_catalog.core.security import hash_password
from course_catalog.api import admin, auth, courses, users
from course_catalog.models.user import normalize_email

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="[%(asctime)s] %(levelname)s in %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

# QUIET noisy libraries at or above ERROR:
logging.getLogger("pymongo").setLevel(logging.ERROR)
logging.getLogger("passlib").setLevel(logging.ERROR)


async def seed_first_admin(db: Database):
    """Create the FIRST_ADMIN_* account once, if configured."""
    first_admin_email = config.FIRST_ADMIN_EMAIL
    first_admin_password = config.FIRST_ADMIN_PASSWORD

    if not (first_admin_email and first_admin_password):
        logger.info("No FIRST_ADMIN_* environment vars set. Skipping admin seed.")
        return None

    first_admin_email = normalize_email(first_admin_email)
    existing_admin = await db.users.find_one({"email": first_admin_email})
    if existing_admin:
        logger.info(f"Admin user already exists for {first_admin_email}, skipping seed.")
        return None

    new_admin = {
        "email": first_admin_email,
        "role": "admin",
        "hashed_password": hash_password(first_admin_password),
        "enrolled_courses": [],
    }
    result = await db.users.insert_one(new_admin)
    logger.info("First admin created: %s (id %s)", first_admin_email, result.inserted_id)
    return result.inserted_id


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = Database()
    await db.connect()
    app.state.db = db
    await seed_first_admin(db)
    try:
        yield
    finally:
        db.close()


app = FastAPI(title="Course Catalog API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={"message": "Invalid request.", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Server error."})


app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(courses.router, prefix="/api/courses", tags=["Courses"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])


@app.get("/")
def health_check():
    logger.debug("Health check endpoint called.")
    return {"status": "ok", "message": "Backend is running"}


def run():
    import uvicorn

    uvicorn.run(app, host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
