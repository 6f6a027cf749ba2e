from contextlib import asynccontextmanager

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quickbite.api.health import router as health_router
from quickbite.api.routes_cart import router as cart_router
from quickbite.api.routes_catalogue import router as catalogue_router
from quickbite.api.routes_favorites import router as favorites_router
from quickbite.api.routes_order import router as order_router
from quickbite.api.routes_promotions import router as promotions_router
from quickbite.config import settings
from quickbite.db import init_db
from quickbite.services.order_progression import OrderProgression
from quickbite.utils.log import get_logger

log = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup; RESET_DB=1 forces a clean schema and reseed
    init_db()

    # in-memory scheduler driving order status progression
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.start()
    app.state.scheduler = scheduler
    app.state.progression = OrderProgression(scheduler)
    log.info(
        f"order progression {'enabled' if settings.ORDER_PROGRESSION_ENABLED else 'disabled'}"
    )

    try:
        yield
    finally:
        app.state.progression = None
        scheduler.shutdown(wait=False)


app = FastAPI(title="QuickBite - Backend", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(catalogue_router, tags=["catalogue"])

app.include_router(cart_router, tags=["cart"])

app.include_router(order_router, prefix="/api/orders", tags=["orders"])

app.include_router(favorites_router, tags=["favorites"])

app.include_router(promotions_router, tags=["promotions"])
