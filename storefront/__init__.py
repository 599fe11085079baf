import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from storefront.configuration.settings import Configuration
from storefront.core.exceptions.handlers import register_exception_handlers
from storefront.core.templates import STATIC_DIR
from storefront.database import init_db

from storefront.auth.auth import AuthRouter
from storefront.admin.admin import AdminRouter

from storefront.routes.home import HomeRouter
from storefront.routes.product import ProductRouter
from storefront.routes.cart import CartRouter
from storefront.routes.order import OrderRouter
from storefront.routes.payment import PaymentRouter
from storefront.routes.review import ReviewRouter
from storefront.routes.api.product_api import ProductApiRouter

configuration = Configuration()

logging.info(f"SYSTEM >>> Environment loaded: {configuration.environment}")


def create_app():
    """
    Builds the FastAPI application: middlewares, static files, error pages and routers.
    """
    app = FastAPI(title="Storefront")

    logging.info("SYSTEM >>> Initializing the database...")
    init_db()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=configuration.cors_origins,
        allow_credentials="*" not in configuration.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
    logging.info("SYSTEM >>> /static mounted")

    register_exception_handlers(app)

    app.include_router(HomeRouter())

    app.include_router(AuthRouter())
    app.include_router(AdminRouter())

    app.include_router(ProductRouter())
    app.include_router(CartRouter())
    app.include_router(OrderRouter())
    app.include_router(PaymentRouter())
    app.include_router(ReviewRouter())
    app.include_router(ProductApiRouter())

    return app
