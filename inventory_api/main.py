import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from inventory_api.core.config import Settings, get_settings
from inventory_api.core.envelope import install_error_handlers, respond
from inventory_api.core.logging import add_context, clear_context, configure_logging, get_logger
from inventory_api.core.result import Err, Ok
from inventory_api.core.security import PasswordHasher, TokenService
from inventory_api.db import INVENTORY_COLLECTION, USERS_COLLECTION, DocumentRepository, create_client, ping
from inventory_api.handlers.inventory import build_inventory_handler
from inventory_api.handlers.users import AccountService, UserHandler
from inventory_api.routers import auth, inventory, users
from inventory_api.routers.graph import build_graphql_router

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, client=None) -> FastAPI:
    """Build the application.

    Everything stateful (store client, repositories, handlers) is created once
    in the lifespan and kept on ``app.state``. Pass ``client`` to use an
    existing Motor-compatible client instead of connecting to ``mongo_uri``.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        mongo = client if client is not None else create_client(settings)
        database = mongo[settings.db_name]

        items_repository = DocumentRepository(database[INVENTORY_COLLECTION], unique_fields=["name"])
        users_repository = DocumentRepository(database[USERS_COLLECTION], unique_fields=["email"])
        await items_repository.ensure_indexes()
        await users_repository.ensure_indexes()

        tokens = TokenService.from_settings(settings)
        user_handler = UserHandler(users_repository, PasswordHasher(settings.bcrypt_rounds))

        app.state.database = database
        app.state.tokens = tokens
        app.state.inventory = build_inventory_handler(items_repository)
        app.state.users = user_handler
        app.state.accounts = AccountService(user_handler, tokens)

        if settings.admin_email and settings.admin_password:
            created = await app.state.accounts.ensure_admin(
                settings.admin_email,
                settings.admin_password,
                settings.admin_first_name,
                settings.admin_last_name,
            )
            if isinstance(created, Err):
                logger.error("Could not create administrator", error=created.error.message)

        logger.info("Application started", database=settings.db_name, environment=settings.environment)
        yield

        if client is None:
            mongo.close()

    app = FastAPI(title="Inventory API", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    @app.middleware("http")
    async def bind_request_context(request: Request, call_next):
        request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        clear_context()
        add_context(request_id=request_id, method=request.method, path=request.url.path)
        response = await call_next(request)
        response.headers["X-Request-Id"] = request_id
        return response

    app.include_router(auth.router)
    app.include_router(inventory.router)
    app.include_router(users.router)
    app.include_router(build_graphql_router(), prefix="/graphql")

    @app.get("/ping")
    async def ping_db(request: Request):
        return respond(request, Ok({"mongo_ok": await ping(request.app.state.database)}))

    return app
