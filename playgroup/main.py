import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from playgroup.api.v1.academic_years.router import router as academic_years_router
from playgroup.api.v1.activities.router import router as activities_router
from playgroup.api.v1.attendance.router import router as attendance_router
from playgroup.api.v1.auth.router import router as auth_router
from playgroup.api.v1.auth.roles_router import router as roles_router
from playgroup.api.v1.batches.router import router as batches_router
from playgroup.api.v1.classes.classes_router import router as classes_router
from playgroup.api.v1.dashboard.router import router as dashboard_router
from playgroup.api.v1.expenses.router import router as expenses_router
from playgroup.api.v1.fee_payments.router import router as fee_payments_router
from playgroup.api.v1.fee_reports.router import router as fee_reports_router
from playgroup.api.v1.fee_structures.router import router as fee_structures_router
from playgroup.api.v1.inventory.router import router as inventory_router
from playgroup.api.v1.reminders.router import router as reminders_router
from playgroup.api.v1.students.router import router as students_router
from playgroup.api.v1.users.router import router as users_router
from playgroup.auth.services import seed_default_permissions, seed_superadmin
from playgroup.core.config import settings
from playgroup.core.logging import configure_logging
from playgroup.db.session import AsyncSessionLocal, init_models

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    async with AsyncSessionLocal() as db:
        await seed_default_permissions(db)
        await seed_superadmin(db)
    logger.info("Playgroup backend started")
    yield


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Validation error", "errors": jsonable_encoder(exc.errors())},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="Playgroup Admin Backend", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Routers
    app.include_router(auth_router)
    app.include_router(roles_router)
    app.include_router(users_router)
    app.include_router(academic_years_router)
    app.include_router(classes_router)
    app.include_router(batches_router)
    app.include_router(students_router)
    app.include_router(fee_structures_router)
    app.include_router(fee_payments_router)
    app.include_router(fee_reports_router)
    app.include_router(reminders_router)
    app.include_router(attendance_router)
    app.include_router(expenses_router)
    app.include_router(inventory_router)
    app.include_router(activities_router)
    app.include_router(dashboard_router)

    return app


app = create_app()
