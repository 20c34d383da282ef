# barbershop/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from barbershop.config import LOG_LEVEL
from barbershop.db import init_db
from barbershop.errors import BarbershopError
from barbershop.routers import (
    admin_routes,
    appointments_routes,
    auth_routes,
    cash_flow_routes,
    loyalty_routes,
    products_routes,
    professionals_routes,
    reports_routes,
    services_routes,
    users_routes,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database ready")
    yield


app = FastAPI(title="Barbershop API", lifespan=lifespan)


@app.exception_handler(BarbershopError)
async def barbershop_error_handler(request: Request, exc: BarbershopError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/health")
def health_check():
    return {"status": "ok"}


app.include_router(auth_routes.router)
app.include_router(users_routes.router)
app.include_router(services_routes.router)
app.include_router(professionals_routes.router)
app.include_router(products_routes.router)
app.include_router(appointments_routes.router)
app.include_router(loyalty_routes.router)
app.include_router(cash_flow_routes.router)
app.include_router(reports_routes.router)
app.include_router(admin_routes.router)
