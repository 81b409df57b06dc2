import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from arthub.config import settings
from arthub.database import create_db_and_tables
from arthub.routes import (
    analytics,
    artworks,
    auth,
    cart,
    comments,
    exhibitions,
    follows,
    health,
    messages,
    orders,
    users,
    virtual_exhibitions,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.ENV == "local":
        create_db_and_tables()
    yield

app = FastAPI(title="Art Hub Marketplace API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(artworks.router, prefix="/artworks", tags=["Artworks"])
app.include_router(cart.router, prefix="/cart", tags=["Cart"])
app.include_router(orders.router, prefix="/orders", tags=["Orders"])
app.include_router(comments.router, prefix="/comments", tags=["Comments"])
app.include_router(follows.router, prefix="/follows", tags=["Follows"])
app.include_router(messages.router, prefix="/messages", tags=["Messages"])
app.include_router(exhibitions.router, prefix="/exhibitions", tags=["Exhibitions"])
app.include_router(virtual_exhibitions.router, prefix="/virtual-exhibitions", tags=["Virtual Exhibitions"])
app.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "auth_endpoints": ["/auth/register", "/auth/login", "/auth/me"],
        "artwork_endpoints": ["/artworks", "/artworks/categories", "/artworks/{artwork_id}"],
        "cart": [
            "/cart", "/cart/add", "/cart/item/{artwork_id}",
        ],
        "orders": ["/orders", "/orders/checkout", "/orders/{order_id}"],
        "exhibitions": ["/exhibitions", "/virtual-exhibitions"],
    }
