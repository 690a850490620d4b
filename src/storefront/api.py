"""FastAPI REST API for the storefront."""

import logging
from decimal import Decimal
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from pydantic import BaseModel, ConfigDict, Field

from . import __version__, config
from .accounts import authenticate, check_admin_credentials, register_user
from .cards import CheckoutForm
from .cart import add_to_cart, compute_cart_totals, remove_from_cart, update_quantity
from .catalog_store import ALL_CATEGORIES, CatalogStore
from .checkout import Checkout, CheckoutOutcome, CheckoutState
from .comment_store import CommentStore
from .errors import (
    CategoryExistsError,
    CategoryInUseError,
    CategoryNotFoundError,
    CommentNotFoundError,
    DuplicateOrderCodeError,
    EmptyCartError,
    InvalidCategoryError,
    InvalidCommentError,
    InvalidCredentialsError,
    InvalidProductError,
    InvalidRegistrationError,
    OrderNotFoundError,
    OrderPersistenceError,
    ProductNotFoundError,
    ProductUnavailableError,
    StorefrontError,
    UserExistsError,
)
from .models import CartTotals
from .order_store import OrderStore
from .pricing import with_pricing
from .session_store import InMemoryCartStore
from .user_store import UserStore
from .utils import parse_image_urls

logger = logging.getLogger(__name__)


# --- Pydantic Schemas ---


class ProductSchema(BaseModel):
    id: int
    name: str
    description: str
    category: str
    stock: int
    price: str
    discount_percent: str
    sale_price: str
    images: list[str]
    image_url: Optional[str] = None
    created_at: str


class ProductListResponse(BaseModel):
    products: list[ProductSchema]
    count: int
    category: str
    search: str


class CategorySchema(BaseModel):
    id: str
    label: str
    image_url: Optional[str] = None


class CommentSchema(BaseModel):
    id: int
    product_id: int
    author_name: str
    content: str
    admin_reply: Optional[str] = None
    user_id: Optional[int] = None
    created_at: str


class ProductDetailResponse(BaseModel):
    product: ProductSchema
    related: list[ProductSchema]
    comments: list[CommentSchema]


class StatsResponse(BaseModel):
    total_products: int
    total_stock: int
    total_categories: int


class CartItemSchema(BaseModel):
    id: int
    name: str
    qty: int
    price: str
    original_price: str
    discount_percent: str
    image_url: Optional[str] = None


class CartTotalsSchema(BaseModel):
    items: list[CartItemSchema]
    total_amount: str
    shipping: str
    payable: str
    total_items: int


class CartResponse(BaseModel):
    totals: CartTotalsSchema
    item_count: int


class CartAddRequest(BaseModel):
    product_id: int


class CartUpdateRequest(BaseModel):
    qty: int = Field(..., description="New quantity; 0 removes the line")


class CheckoutRequest(BaseModel):
    """Payment form. Card number and CVC are never stored."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    email: str = ""
    card_number: str = Field(default="", alias="cardNumber")
    exp: str = Field(default="", description="Expiry as MM/YY")
    cvc: str = ""


class OrderSchema(BaseModel):
    id: Optional[int] = None
    code: str
    customer_name: str
    customer_email: Optional[str] = None
    total_amount: str
    shipping_amount: str
    payable_amount: str
    items: list[CartItemSchema]
    card_brand: str
    card_last4: str
    status: str
    created_at: str


class CheckoutResponse(BaseModel):
    state: str
    totals: Optional[CartTotalsSchema] = None
    form: dict[str, str]
    errors: list[str]
    error_kind: Optional[str] = None
    retryable: bool = False
    message: Optional[str] = None
    order: Optional[OrderSchema] = None
    masked_card: Optional[str] = None


class CommentCreateRequest(BaseModel):
    content: str
    author_name: Optional[str] = None
    user_id: Optional[int] = None


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class UserSchema(BaseModel):
    id: int
    name: str
    email: str


class ProductWriteRequest(BaseModel):
    name: str
    category: str
    price: Decimal
    stock: int = 0
    description: str = ""
    images: list[str] = Field(default_factory=list)
    image_urls: Optional[str] = Field(
        None, description="Newline-separated image URLs, appended to images"
    )
    discount_percent: Decimal = Decimal("0")


class CategoryCreateRequest(BaseModel):
    label: str
    slug: Optional[str] = Field(None, description="Defaults to a slug of the label")
    image_url: Optional[str] = None


class CommentReplyRequest(BaseModel):
    reply: str


class CommentEditRequest(BaseModel):
    content: str


class OrderListResponse(BaseModel):
    orders: list[OrderSchema]
    count: int


class ErrorResponse(BaseModel):
    detail: str
    error_type: str


# --- Dependencies ---


_cart_store = InMemoryCartStore()
_basic_auth = HTTPBasic()


def get_catalog_store() -> CatalogStore:
    return CatalogStore()


def get_order_store() -> OrderStore:
    return OrderStore()


def get_comment_store() -> CommentStore:
    return CommentStore()


def get_user_store() -> UserStore:
    return UserStore()


def get_cart_store() -> InMemoryCartStore:
    """The process-wide cart store backing the API's sessions."""
    return _cart_store


def get_checkout(
    catalog: CatalogStore = Depends(get_catalog_store),
    orders: OrderStore = Depends(get_order_store),
    carts: InMemoryCartStore = Depends(get_cart_store),
) -> Checkout:
    return Checkout(product_lookup=catalog, order_sink=orders, cart_store=carts)


def require_admin(credentials: HTTPBasicCredentials = Depends(_basic_auth)) -> str:
    if not check_admin_credentials(credentials.username, credentials.password):
        raise HTTPException(
            status_code=401,
            detail="Invalid admin credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return credentials.username


# --- Helper Functions ---


def product_to_schema(product) -> ProductSchema:
    """Convert a Product to its schema with the current sale price."""
    return ProductSchema(**with_pricing(product).to_dict())


def totals_to_schema(totals: CartTotals) -> CartTotalsSchema:
    return CartTotalsSchema(
        items=[CartItemSchema(**item.to_dict()) for item in totals.items],
        total_amount=str(totals.total_amount),
        shipping=str(totals.shipping),
        payable=str(totals.payable),
        total_items=totals.total_items,
    )


def outcome_to_schema(outcome: CheckoutOutcome) -> CheckoutResponse:
    return CheckoutResponse(
        state=outcome.state.value,
        totals=totals_to_schema(outcome.totals) if outcome.totals else None,
        form=outcome.form.to_dict(),
        errors=outcome.errors,
        error_kind=outcome.error_kind.value if outcome.error_kind else None,
        retryable=outcome.retryable,
        message=outcome.message,
        order=OrderSchema(**outcome.order.to_dict()) if outcome.order else None,
        masked_card=outcome.masked_card,
    )


# --- FastAPI App ---


app = FastAPI(
    title="storefront API",
    description="REST API for the storefront catalog, cart and checkout",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Global Exception Handler ---


# Map exception types to HTTP status codes
ERROR_STATUS_CODES: dict[type, int] = {
    ProductNotFoundError: 404,
    ProductUnavailableError: 409,
    InvalidProductError: 400,
    CategoryNotFoundError: 404,
    CategoryExistsError: 409,
    CategoryInUseError: 409,
    InvalidCategoryError: 400,
    CommentNotFoundError: 404,
    InvalidCommentError: 400,
    OrderNotFoundError: 404,
    OrderPersistenceError: 503,
    DuplicateOrderCodeError: 503,
    EmptyCartError: 409,
    UserExistsError: 409,
    InvalidRegistrationError: 400,
    InvalidCredentialsError: 401,
}


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    """Map StorefrontError subclasses to appropriate HTTP responses."""
    status_code = ERROR_STATUS_CODES.get(type(exc), 500)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error_type": type(exc).__name__},
    )


# --- Endpoints ---


@app.get("/api/health")
def health_check(catalog: CatalogStore = Depends(get_catalog_store)):
    """Health check endpoint."""
    try:
        return {"status": "ok", "product_count": len(catalog.list_products())}
    except (OSError, ValueError) as e:
        return {"status": "error", "detail": str(e)}


# --- Catalog Endpoints ---


@app.get("/api/products", response_model=ProductListResponse)
def list_products(
    category: str = Query(default=ALL_CATEGORIES),
    q: str = Query(default=""),
    catalog: CatalogStore = Depends(get_catalog_store),
):
    """List products, filtered by category and search term."""
    # Unknown categories fall back to the full catalog
    if category != ALL_CATEGORIES and not catalog.is_valid_category(category):
        category = ALL_CATEGORIES
    products = catalog.filter_products(category=category, search=q)
    return ProductListResponse(
        products=[product_to_schema(p) for p in products],
        count=len(products),
        category=category,
        search=q,
    )


@app.get("/api/products/featured", response_model=list[ProductSchema])
def list_featured_products(
    limit: int = Query(default=4, ge=1, le=50),
    catalog: CatalogStore = Depends(get_catalog_store),
):
    return [product_to_schema(p) for p in catalog.featured(limit)]


@app.get("/api/products/{product_id}", response_model=ProductDetailResponse)
def get_product(
    product_id: int,
    catalog: CatalogStore = Depends(get_catalog_store),
    comments: CommentStore = Depends(get_comment_store),
):
    """Product detail with related products and comments."""
    product = catalog.require_product(product_id)
    return ProductDetailResponse(
        product=product_to_schema(product),
        related=[product_to_schema(p) for p in catalog.related(product)],
        comments=[CommentSchema(**c.to_dict()) for c in comments.list_comments(product_id)],
    )


@app.get("/api/categories", response_model=list[CategorySchema])
def list_categories(catalog: CatalogStore = Depends(get_catalog_store)):
    return [CategorySchema(**c.to_dict()) for c in catalog.list_categories()]


@app.get("/api/stats", response_model=StatsResponse)
def get_stats(catalog: CatalogStore = Depends(get_catalog_store)):
    return StatsResponse(**catalog.get_stats())


# --- Cart Endpoints ---


def _cart_response(lines, catalog: CatalogStore) -> CartResponse:
    totals = compute_cart_totals(lines, catalog)
    return CartResponse(totals=totals_to_schema(totals), item_count=totals.total_items)


@app.get("/api/cart", response_model=CartResponse)
def get_cart(
    x_session_id: str = Header(...),
    catalog: CatalogStore = Depends(get_catalog_store),
    carts: InMemoryCartStore = Depends(get_cart_store),
):
    """Current session cart, priced against the live catalog."""
    return _cart_response(carts.get_cart(x_session_id), catalog)


@app.post("/api/cart/items", response_model=CartResponse)
def add_cart_item(
    request: CartAddRequest,
    x_session_id: str = Header(...),
    catalog: CatalogStore = Depends(get_catalog_store),
    carts: InMemoryCartStore = Depends(get_cart_store),
):
    lines = add_to_cart(carts, catalog, x_session_id, request.product_id)
    return _cart_response(lines, catalog)


@app.patch("/api/cart/items/{product_id}", response_model=CartResponse)
def update_cart_item(
    product_id: int,
    request: CartUpdateRequest,
    x_session_id: str = Header(...),
    catalog: CatalogStore = Depends(get_catalog_store),
    carts: InMemoryCartStore = Depends(get_cart_store),
):
    lines = update_quantity(carts, x_session_id, product_id, request.qty)
    return _cart_response(lines, catalog)


@app.delete("/api/cart/items/{product_id}", response_model=CartResponse)
def delete_cart_item(
    product_id: int,
    x_session_id: str = Header(...),
    catalog: CatalogStore = Depends(get_catalog_store),
    carts: InMemoryCartStore = Depends(get_cart_store),
):
    lines = remove_from_cart(carts, x_session_id, product_id)
    return _cart_response(lines, catalog)


# --- Checkout Endpoints ---


@app.get("/api/checkout", response_model=CheckoutResponse)
def view_checkout(
    x_session_id: str = Header(...),
    checkout: Checkout = Depends(get_checkout),
):
    """
    Checkout page data: totals and a blank form.

    An empty cart answers 409 EmptyCartError; clients go back to the cart.
    """
    outcome = checkout.view(x_session_id)
    if outcome.state == CheckoutState.EMPTY_CART:
        raise EmptyCartError(x_session_id)
    return outcome_to_schema(outcome)


@app.post("/api/checkout", response_model=CheckoutResponse)
def submit_checkout(
    request: CheckoutRequest,
    response: Response,
    x_session_id: str = Header(...),
    checkout: Checkout = Depends(get_checkout),
):
    """
    Submit the payment form.

    201 with the order on success, 422 with the error list when the form is
    invalid, 503 when the order could not be stored (cart kept, retry).
    """
    form = CheckoutForm.from_mapping(request.model_dump())
    outcome = checkout.submit(x_session_id, form)

    if outcome.state == CheckoutState.EMPTY_CART:
        raise EmptyCartError(x_session_id)
    if outcome.state == CheckoutState.COMPLETED:
        response.status_code = 201
    elif outcome.retryable:
        response.status_code = 503
    else:
        response.status_code = 422
    return outcome_to_schema(outcome)


# --- Comment Endpoints ---


@app.post("/api/products/{product_id}/comments", response_model=CommentSchema, status_code=201)
def create_comment(
    product_id: int,
    request: CommentCreateRequest,
    catalog: CatalogStore = Depends(get_catalog_store),
    comments: CommentStore = Depends(get_comment_store),
):
    catalog.require_product(product_id)
    comment = comments.add_comment(
        product_id=product_id,
        content=request.content,
        author_name=request.author_name,
        user_id=request.user_id,
    )
    return CommentSchema(**comment.to_dict())


@app.delete("/api/products/{product_id}/comments/{comment_id}")
def delete_own_comment(
    product_id: int,
    comment_id: int,
    user_id: Optional[int] = Query(default=None),
    comments: CommentStore = Depends(get_comment_store),
):
    """Delete a comment on behalf of the user who wrote it."""
    deleted = comments.delete_own_comment(product_id, comment_id, user_id)
    return {"deleted": deleted}


# --- Account Endpoints ---


@app.post("/api/auth/register", response_model=UserSchema, status_code=201)
def register(request: RegisterRequest, users: UserStore = Depends(get_user_store)):
    user = register_user(users, request.name, request.email, request.password)
    return UserSchema(**user.to_public_dict())


@app.post("/api/auth/login", response_model=UserSchema)
def login(request: LoginRequest, users: UserStore = Depends(get_user_store)):
    user = authenticate(users, request.email, request.password)
    return UserSchema(**user.to_public_dict())


# --- Admin Endpoints ---


@app.get("/api/admin/dashboard")
def admin_dashboard(
    admin: str = Depends(require_admin),
    catalog: CatalogStore = Depends(get_catalog_store),
    orders: OrderStore = Depends(get_order_store),
    comments: CommentStore = Depends(get_comment_store),
):
    return {
        "stats": catalog.get_stats(),
        "category_count": len(catalog.list_categories()),
        "order_count": len(orders.list_orders()),
        "comment_count": len(comments.list_comments()),
    }


@app.post("/api/admin/products", response_model=ProductSchema, status_code=201)
def admin_create_product(
    request: ProductWriteRequest,
    admin: str = Depends(require_admin),
    catalog: CatalogStore = Depends(get_catalog_store),
):
    product = catalog.create_product(
        name=request.name,
        category=request.category,
        price=request.price,
        stock=request.stock,
        description=request.description,
        images=request.images + parse_image_urls(request.image_urls),
        discount_percent=request.discount_percent,
    )
    return product_to_schema(product)


@app.put("/api/admin/products/{product_id}", response_model=ProductSchema)
def admin_update_product(
    product_id: int,
    request: ProductWriteRequest,
    admin: str = Depends(require_admin),
    catalog: CatalogStore = Depends(get_catalog_store),
):
    product = catalog.update_product(
        product_id,
        name=request.name,
        category=request.category,
        price=request.price,
        stock=request.stock,
        description=request.description,
        images=request.images + parse_image_urls(request.image_urls),
        discount_percent=request.discount_percent,
    )
    return product_to_schema(product)


@app.delete("/api/admin/products/{product_id}", response_model=ProductSchema)
def admin_delete_product(
    product_id: int,
    admin: str = Depends(require_admin),
    catalog: CatalogStore = Depends(get_catalog_store),
):
    return product_to_schema(catalog.delete_product(product_id))


@app.post("/api/admin/categories", response_model=CategorySchema, status_code=201)
def admin_create_category(
    request: CategoryCreateRequest,
    admin: str = Depends(require_admin),
    catalog: CatalogStore = Depends(get_catalog_store),
):
    category = catalog.create_category(
        label=request.label, slug=request.slug, image_url=request.image_url
    )
    return CategorySchema(**category.to_dict())


@app.delete("/api/admin/categories/{category_id}", response_model=CategorySchema)
def admin_delete_category(
    category_id: str,
    admin: str = Depends(require_admin),
    catalog: CatalogStore = Depends(get_catalog_store),
):
    return CategorySchema(**catalog.delete_category(category_id).to_dict())


@app.get("/api/admin/orders", response_model=OrderListResponse)
def admin_list_orders(
    limit: Optional[int] = Query(default=None, ge=1),
    admin: str = Depends(require_admin),
    orders: OrderStore = Depends(get_order_store),
):
    items = orders.list_orders(limit=limit)
    return OrderListResponse(
        orders=[OrderSchema(**o.to_dict()) for o in items],
        count=len(items),
    )


@app.get("/api/admin/orders/{code}", response_model=OrderSchema)
def admin_get_order(
    code: str,
    admin: str = Depends(require_admin),
    orders: OrderStore = Depends(get_order_store),
):
    return OrderSchema(**orders.get_order(code).to_dict())


@app.get("/api/admin/comments", response_model=list[CommentSchema])
def admin_list_comments(
    product_id: Optional[int] = Query(default=None),
    admin: str = Depends(require_admin),
    comments: CommentStore = Depends(get_comment_store),
):
    return [CommentSchema(**c.to_dict()) for c in comments.list_comments(product_id)]


@app.post("/api/admin/comments/{comment_id}/reply", response_model=CommentSchema)
def admin_reply_comment(
    comment_id: int,
    request: CommentReplyRequest,
    admin: str = Depends(require_admin),
    comments: CommentStore = Depends(get_comment_store),
):
    return CommentSchema(**comments.reply(comment_id, request.reply).to_dict())


@app.patch("/api/admin/comments/{comment_id}", response_model=CommentSchema)
def admin_edit_comment(
    comment_id: int,
    request: CommentEditRequest,
    admin: str = Depends(require_admin),
    comments: CommentStore = Depends(get_comment_store),
):
    return CommentSchema(**comments.update_content(comment_id, request.content).to_dict())


@app.delete("/api/admin/comments/{comment_id}", response_model=CommentSchema)
def admin_delete_comment(
    comment_id: int,
    admin: str = Depends(require_admin),
    comments: CommentStore = Depends(get_comment_store),
):
    return CommentSchema(**comments.delete_comment(comment_id).to_dict())
