import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from .config import Settings, get_settings
from .database import Base, build_engine, build_session_factory
from .errors import NotFoundError, catch_unhandled_errors, register_error_handlers
from .middleware import add_security_headers, elapsed_ms, log_requests, require_api_key
from .repository import ProductRepository, UserRepository
from .responses import error_response, success_response
from .seed_items import seed_items
from .validation import ID_RULES, PRODUCT_RULES, USER_RULES, validate

logger = logging.getLogger("ecommerce.api")

MAX_ID = 2**63 - 1
MIN_ID = -(2**63)

settings = get_settings()
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))


@asynccontextmanager
async def lifespan(app: FastAPI):
    current: Settings = get_settings()
    engine = build_engine(current.database_url)
    Base.metadata.create_all(bind=engine)
    with Session(engine) as session:
        seed_items(session)

    session_factory = build_session_factory(engine)
    app.state.settings = current
    app.state.products = ProductRepository(session_factory)
    app.state.users = UserRepository(session_factory)
    logger.info("Store ready on %s (env=%s)", engine.url.render_as_string(), current.environment)
    yield
    engine.dispose()


app = FastAPI(title="E-Commerce API", version="4.0.0", lifespan=lifespan)
app.state.settings = settings
register_error_handlers(app)

# Each registration wraps the previous one, so the last added runs first:
# CORS -> security headers -> access log -> error backstop -> API key gate -> routes.
app.middleware("http")(require_api_key)
app.middleware("http")(catch_unhandled_errors)
app.middleware("http")(log_requests)
app.middleware("http")(add_security_headers)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_products(request: Request) -> ProductRepository:
    return request.app.state.products


def get_users(request: Request) -> UserRepository:
    return request.app.state.users


def parse_id(raw: str) -> Optional[int]:
    """Integer id within SQLite's signed 64-bit INTEGER range, else None."""
    try:
        value = int(raw)
    except ValueError:
        return None
    if not MIN_ID <= value <= MAX_ID:
        return None
    return value


def product_values(payload: dict[str, Any]) -> dict[str, Any]:
    return {
        "name": str(payload["name"]),
        "description": str(payload["description"]),
        "price": float(payload["price"]),
    }


# ==================== Root ====================
@app.get("/")
def index(request: Request):
    return success_response(
        "Welcome to the e-commerce API",
        {
            "message": "Welcome to the e-commerce API",
            "status": "server running",
            "processing_time": f"{elapsed_ms(request)} ms",
        },
    )


@app.get("/api/test-async")
async def delayed_success():
    await asyncio.sleep(0.1)
    return success_response("async succeeded")


# ==================== Products ====================
@app.get("/api/products")
def list_products(products: ProductRepository = Depends(get_products)):
    return success_response("product list", products.list())


@app.get("/api/products/{id}", dependencies=[Depends(validate(ID_RULES))])
def get_product(id: str, products: ProductRepository = Depends(get_products)):
    product_id = parse_id(id)
    product = products.get_by_id(product_id) if product_id is not None else None
    if product is None:
        # Lookups raise; the central handler turns this into a 404 envelope.
        raise NotFoundError("product with that id not found")
    return success_response("product found", product)


@app.post("/api/products")
def create_product(
    payload: dict[str, Any] = Depends(validate(PRODUCT_RULES)),
    products: ProductRepository = Depends(get_products),
):
    product = products.insert(product_values(payload))
    return success_response("product created", product, status_code=status.HTTP_201_CREATED)


@app.get("/api/search")
def search_products(
    name: Optional[str] = None,
    max_price: Optional[str] = None,
    products: ProductRepository = Depends(get_products),
):
    price_cap: Optional[float] = None
    if max_price:
        try:
            price_cap = float(max_price)
        except ValueError:
            return success_response("search results", [])
    return success_response("search results", products.search(name=name, max_price=price_cap))


@app.put("/api/products/{id}")
def update_product(
    id: str,
    payload: dict[str, Any] = Depends(validate(PRODUCT_RULES)),
    products: ProductRepository = Depends(get_products),
):
    product_id = parse_id(id)
    product = products.update(product_id, product_values(payload)) if product_id is not None else None
    if product is None:
        return error_response("product not found", status.HTTP_404_NOT_FOUND)
    return success_response("product updated", product)


@app.delete("/api/products/{id}")
def delete_product(id: str, products: ProductRepository = Depends(get_products)):
    product_id = parse_id(id)
    deleted = products.delete(product_id) if product_id is not None else None
    if deleted is None:
        return error_response("product not found", status.HTTP_404_NOT_FOUND)
    return success_response("product deleted", deleted)


# ==================== Users ====================
@app.get("/api/users")
def list_users(users: UserRepository = Depends(get_users)):
    return success_response("user list", users.list())


@app.get("/api/users/search")
def search_users(name: Optional[str] = None, users: UserRepository = Depends(get_users)):
    return success_response("search results", users.search(name=name))


@app.get("/api/users/{id}", dependencies=[Depends(validate(ID_RULES))])
def get_user(id: str, users: UserRepository = Depends(get_users)):
    user_id = parse_id(id)
    user = users.get_by_id(user_id) if user_id is not None else None
    if user is None:
        raise NotFoundError("user with that id not found")
    return success_response("user found", user)


@app.post("/api/users")
def create_user(
    payload: dict[str, Any] = Depends(validate(USER_RULES)),
    users: UserRepository = Depends(get_users),
):
    user = users.insert(payload)
    return success_response("user created", user, status_code=status.HTTP_201_CREATED)


@app.put("/api/users/{id}")
def update_user(
    id: str,
    payload: dict[str, Any] = Depends(validate(USER_RULES)),
    users: UserRepository = Depends(get_users),
):
    user_id = parse_id(id)
    user = users.update(user_id, payload) if user_id is not None else None
    if user is None:
        return error_response("user not found", status.HTTP_404_NOT_FOUND)
    return success_response("user updated", user)


@app.delete("/api/users/{id}")
def delete_user(id: str, users: UserRepository = Depends(get_users)):
    user_id = parse_id(id)
    deleted = users.delete(user_id) if user_id is not None else None
    if deleted is None:
        return error_response("user not found", status.HTTP_404_NOT_FOUND)
    return success_response("user deleted", deleted)


def run() -> None:
    import uvicorn

    uvicorn.run("ecommerce_api.main:app", host="0.0.0.0", port=get_settings().port)


if __name__ == "__main__":
    run()
