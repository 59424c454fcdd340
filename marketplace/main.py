import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketplace.config import settings
from marketplace.database import build_database, create_db_and_tables
from marketplace.routes import books, cart, health, orders

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # tests install their own handle before startup
    if getattr(app.state, "db", None) is None:
        app.state.db = build_database()

    # Run DB creation ONLY in local
    if settings.env == "local":
        create_db_and_tables(app.state.db.engine)

    logger.info("Database pool ready")
    yield

    app.state.db.dispose()


app = FastAPI(title="Bookmarket API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(books.router, prefix="/books", tags=["Books"])
app.include_router(cart.router, prefix="/cart", tags=["Cart"])
app.include_router(orders.router, prefix="/orders", tags=["Orders"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "message": "Welcome to the Bookmarket API",
        "book_endpoints": ["/books", "/books/{book_id}"],
        "cart_endpoints": ["/cart", "/cart/{item_id}"],
        "order_endpoints": [
            "/orders", "/orders/seller",
            "/orders/{order_id}", "/orders/{order_id}/status"
        ],
    }
