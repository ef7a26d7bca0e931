from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from admin_requests import router as admin_requests_router
from auth import router as auth_router
from core import db, env, errors, logging_config, storage
from courses import router as courses_router
from misc import router as misc_router
from payments import router as payments_router

logging_config.configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    if env.env_bool("DB_AUTO_MIGRATE", False):
        await db.apply_schema()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(title="LMS API", lifespan=lifespan)

# The browser client sends the auth cookie, so origins must be explicit.
app.add_middleware(
    CORSMiddleware,
    allow_origins=sorted(
        {
            env.frontend_url(),
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        }
    ),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

errors.register_exception_handlers(app)

app.include_router(auth_router.router, tags=["user"])
app.include_router(admin_requests_router.router, tags=["admin-requests"])
app.include_router(courses_router.router, tags=["course"])
app.include_router(payments_router.router, tags=["payment"])
app.include_router(misc_router.router, tags=["misc"])

storage.media_root().mkdir(parents=True, exist_ok=True)
app.mount(storage.media_url(), StaticFiles(directory=storage.media_root()), name="media")


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "lms api"}
