from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.health import router as health_router
from app.api.routes_dashboard import router as dashboard_router
from app.api.routes_invoices import router as invoices_router
from app.api.routes_order import router as order_router
from app.api.routes_products import router as products_router
from app.config import settings
from app.db import init_db
from app.utils.logging import get_logger

log = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup; RESET_DB=1 drops and recreates every table
    if settings.RESET_DB:
        log.info("RESET_DB set, recreating schema")
    init_db(reset=settings.RESET_DB)
    yield


app = FastAPI(title="Pure Water - Backend", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # malformed bodies are caller-fixable: 400 like the other validation failures
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "بيانات الطلب غير صالحة", "errors": jsonable_encoder(exc.errors())},
    )


@app.get("/", include_in_schema=False)
def root():
    return {"message": "Welcome to the Pure Water Control API!"}


app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(products_router, prefix="/api/products", tags=["products"])

app.include_router(order_router, prefix="/api/orders", tags=["orders"])

app.include_router(invoices_router, prefix="/api/invoices", tags=["invoices"])

app.include_router(dashboard_router, prefix="/api/dashboard", tags=["dashboard"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=settings.APP_HOST, port=settings.APP_PORT)
