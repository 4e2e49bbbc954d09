import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskpulse.config.settings import settings
from taskpulse.database import Base, engine
from taskpulse.exceptions import TaskPulseError
from taskpulse.routers import auth, department, project, task, user
from taskpulse.services.notifier import notification_dispatcher

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Task Pulse API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Route registration
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(user.router, prefix="/users", tags=["Users"])
app.include_router(department.router, prefix="/departments", tags=["Departments"])
app.include_router(project.router, prefix="/projects", tags=["Projects"])
app.include_router(task.router, prefix="/tasks", tags=["Tasks"])


# Error translation
@app.exception_handler(TaskPulseError)
async def business_error_handler(request: Request, exc: TaskPulseError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    content = {"detail": exc.message}
    if exc.field:
        content["field"] = exc.field
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in error["loc"][1:]), "message": error["msg"]}
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": "Invalid request payload", "errors": errors})


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.exception(
        f"Unhandled error on {request.method} {request.url.path} "
        f"actor={getattr(request.state, 'actor_id', None)} resource={dict(request.path_params)}"
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Startup and shutdown events
@app.on_event("startup")
def startup_event():
    logger.info("Starting Task Pulse API...")
    Base.metadata.create_all(bind=engine)
    notification_dispatcher.start()


@app.on_event("shutdown")
def shutdown_event():
    logger.info("Shutting down Task Pulse API...")
    notification_dispatcher.stop()


@app.get("/")
def read_root():
    return {"message": "Task Pulse API"}


@app.get("/health")
def health():
    return {"status": "ok"}
