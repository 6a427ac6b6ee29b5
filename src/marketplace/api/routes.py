"""FastAPI routes for the marketplace: cart, orders, products, users and stats."""

import json
import math

from fastapi import APIRouter, Depends, Query, Request
from protean.utils.globals import current_domain

from marketplace.api.auth import Principal, current_user, optional_user, require_admin
from marketplace.api.schemas import (
    AddAddressRequest,
    AddProductRequest,
    AdjustStockRequest,
    CartItemRequest,
    CartResponse,
    CheckoutRequest,
    CustomerListItem,
    CustomerListResponse,
    CustomerSummaryResponse,
    MessageResponse,
    OrderResponse,
    PayOrderRequest,
    ProductResponse,
    PublishRequest,
    RegisterUserRequest,
    SetOrderStatusRequest,
    StockHistoryResponse,
    TrackPageViewRequest,
    UpdateAddressRequest,
    UpdateProductRequest,
    UpdateProfileRequest,
    UserResponse,
    VisitorStatsResponse,
)
from marketplace.cart.items import (
    AddToCart,
    ClearCart,
    OpenCart,
    RemoveFromCart,
    UpdateCartItem,
    find_cart,
)
from marketplace.catalogue.listing import (
    AddProduct,
    DeleteProduct,
    SetProductPublication,
    UpdateProduct,
)
from marketplace.catalogue.queries import get_product, list_products
from marketplace.identity.addresses import AddAddress, RemoveAddress, UpdateAddress
from marketplace.identity.profile import DeleteAccount, DeleteCustomer, UpdateProfile
from marketplace.identity.queries import get_customer, get_user, list_customers
from marketplace.identity.registration import RegisterUser
from marketplace.inventory.adjustment import AdjustStock
from marketplace.inventory.stock_history import history_for_product
from marketplace.order.checkout import Checkout
from marketplace.order.payment import PayOrder
from marketplace.order.queries import all_orders, get_order, orders_of_user
from marketplace.order.status import SetOrderStatus
from marketplace.projections.customer_order_summary import summary_for
from marketplace.stats.visit import TrackPageView, visitor_stats


def _dump_json(value):
    return json.dumps(value) if value is not None else None


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_response(user_id) -> CartResponse:
    return CartResponse.from_cart(find_cart(user_id))


@cart_router.get("", response_model=CartResponse)
async def get_cart(principal: Principal = Depends(current_user)) -> CartResponse:
    current_domain.process(OpenCart(user_id=principal.id), asynchronous=False)
    return _cart_response(principal.id)


@cart_router.post("", response_model=CartResponse)
async def add_to_cart(body: CartItemRequest, principal: Principal = Depends(current_user)) -> CartResponse:
    command = AddToCart(
        user_id=principal.id,
        product_id=body.product_id,
        quantity=body.quantity,
        size=body.size,
        color=body.color,
        expected_version=body.expected_version,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(principal.id)


@cart_router.put("", response_model=CartResponse)
async def update_cart_item(body: CartItemRequest, principal: Principal = Depends(current_user)) -> CartResponse:
    command = UpdateCartItem(
        user_id=principal.id,
        product_id=body.product_id,
        quantity=body.quantity,
        size=body.size,
        color=body.color,
        expected_version=body.expected_version,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(principal.id)


@cart_router.delete("/{product_id}", response_model=CartResponse)
async def remove_from_cart(
    product_id: str,
    size: str | None = None,
    color: str | None = None,
    expected_version: int | None = None,
    principal: Principal = Depends(current_user),
) -> CartResponse:
    command = RemoveFromCart(
        user_id=principal.id,
        product_id=product_id,
        size=size,
        color=color,
        expected_version=expected_version,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(principal.id)


@cart_router.delete("", response_model=MessageResponse)
async def clear_cart(principal: Principal = Depends(current_user)) -> MessageResponse:
    current_domain.process(ClearCart(user_id=principal.id), asynchronous=False)
    return MessageResponse(message="Cart cleared")


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def checkout(body: CheckoutRequest, principal: Principal = Depends(current_user)) -> OrderResponse:
    command = Checkout(
        user_id=principal.id,
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        payment_method=body.payment_method,
        shipping_cost=body.shipping_cost,
        checkout_id=body.checkout_id,
        proof_of_payment_url=body.proof_of_payment_url,
        source=body.source,
        items=json.dumps([item.model_dump() for item in body.items]) if body.items else None,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return OrderResponse.from_order(get_order(order_id))


@order_router.get("", response_model=list[OrderResponse])
async def my_orders(principal: Principal = Depends(current_user)) -> list[OrderResponse]:
    return [OrderResponse.from_order(o) for o in orders_of_user(principal.id)]


@order_router.get("/all", response_model=list[OrderResponse])
async def every_order(principal: Principal = Depends(current_user)) -> list[OrderResponse]:
    orders = all_orders() if principal.is_admin else orders_of_user(principal.id)
    return [OrderResponse.from_order(o) for o in orders]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order_detail(order_id: str, principal: Principal = Depends(current_user)) -> OrderResponse:
    order = get_order(order_id)
    order.ensure_visible_to(principal.id, principal.role)
    return OrderResponse.from_order(order)


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def set_order_status(
    order_id: str,
    body: SetOrderStatusRequest,
    principal: Principal = Depends(require_admin),
) -> OrderResponse:
    command = SetOrderStatus(
        order_id=order_id,
        status=body.status,
        tracking_number=body.tracking_number,
        shipping_method=body.shipping_method,
        cod_proof_url=body.cod_proof_url,
        actor_id=principal.id,
    )
    current_domain.process(command, asynchronous=False)
    return OrderResponse.from_order(get_order(order_id))


@order_router.put("/{order_id}/pay", response_model=OrderResponse)
async def pay_order(
    order_id: str,
    body: PayOrderRequest | None = None,
    principal: Principal = Depends(current_user),
) -> OrderResponse:
    command = PayOrder(
        order_id=order_id,
        actor_id=principal.id,
        actor_role=principal.role,
        proof_of_payment_url=body.proof_of_payment_url if body else None,
    )
    current_domain.process(command, asynchronous=False)
    return OrderResponse.from_order(get_order(order_id))


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("", response_model=list[ProductResponse])
async def browse_products(principal: Principal | None = Depends(optional_user)) -> list[ProductResponse]:
    include_unpublished = principal is not None and principal.is_admin
    return [ProductResponse.from_product(p) for p in list_products(include_unpublished)]


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product_detail(product_id: str) -> ProductResponse:
    return ProductResponse.from_product(get_product(product_id))


@product_router.post("", status_code=201, response_model=ProductResponse)
async def add_product(body: AddProductRequest, principal: Principal = Depends(current_user)) -> ProductResponse:
    command = AddProduct(
        seller_id=principal.id,
        name=body.name,
        description=body.description,
        price=body.price,
        stock=body.stock,
        discount=body.discount,
        unit=body.unit,
        weight=body.weight,
        dimensions=_dump_json(body.dimensions.model_dump() if body.dimensions else None),
        sizes=json.dumps(body.sizes),
        colors=json.dumps(body.colors),
        image_url=body.image_url,
        is_published=body.is_published,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return ProductResponse.from_product(get_product(product_id))


@product_router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    body: UpdateProductRequest,
    principal: Principal = Depends(current_user),
) -> ProductResponse:
    command = UpdateProduct(
        product_id=product_id,
        actor_id=principal.id,
        actor_role=principal.role,
        name=body.name,
        description=body.description,
        price=body.price,
        discount=body.discount,
        unit=body.unit,
        weight=body.weight,
        dimensions=_dump_json(body.dimensions.model_dump() if body.dimensions else None),
        sizes=_dump_json(body.sizes),
        colors=_dump_json(body.colors),
        image_url=body.image_url,
    )
    current_domain.process(command, asynchronous=False)
    return ProductResponse.from_product(get_product(product_id))


@product_router.put("/{product_id}/publish", response_model=ProductResponse)
async def publish_product(
    product_id: str,
    body: PublishRequest,
    principal: Principal = Depends(current_user),
) -> ProductResponse:
    command = SetProductPublication(
        product_id=product_id,
        actor_id=principal.id,
        actor_role=principal.role,
        is_published=body.is_published,
    )
    current_domain.process(command, asynchronous=False)
    return ProductResponse.from_product(get_product(product_id))


@product_router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(product_id: str, principal: Principal = Depends(current_user)) -> MessageResponse:
    command = DeleteProduct(product_id=product_id, actor_id=principal.id, actor_role=principal.role)
    current_domain.process(command, asynchronous=False)
    return MessageResponse(message="Product deleted")


@product_router.post("/{product_id}/stock", response_model=ProductResponse)
async def adjust_stock(
    product_id: str,
    body: AdjustStockRequest,
    principal: Principal = Depends(current_user),
) -> ProductResponse:
    command = AdjustStock(
        product_id=product_id,
        actor_id=principal.id,
        actor_role=principal.role,
        change_type=body.change_type,
        quantity_change=body.quantity_change,
        size=body.size,
        color=body.color,
        note=body.note,
    )
    current_domain.process(command, asynchronous=False)
    return ProductResponse.from_product(get_product(product_id))


@product_router.get("/{product_id}/stock-history", response_model=list[StockHistoryResponse])
async def stock_history(product_id: str, principal: Principal = Depends(current_user)) -> list[StockHistoryResponse]:
    product = get_product(product_id)
    product.ensure_manageable_by(principal.id, principal.role)
    return [StockHistoryResponse.from_record(r) for r in history_for_product(product_id)]


# ---------------------------------------------------------------------------
# User Router
# ---------------------------------------------------------------------------
user_router = APIRouter(prefix="/users", tags=["users"])


@user_router.post("", status_code=201, response_model=UserResponse)
async def register_user(body: RegisterUserRequest, principal: Principal = Depends(current_user)) -> UserResponse:
    command = RegisterUser(
        user_id=principal.id,
        name=body.name,
        email=body.email,
        phone_number=body.phone_number,
        gender=body.gender,
        role=principal.role,
        avatar_url=body.avatar_url,
    )
    current_domain.process(command, asynchronous=False)
    return UserResponse.from_user(get_user(principal.id))


@user_router.get("/profile", response_model=UserResponse)
async def get_profile(principal: Principal = Depends(current_user)) -> UserResponse:
    return UserResponse.from_user(get_user(principal.id))


@user_router.put("/profile", response_model=UserResponse)
async def update_profile(body: UpdateProfileRequest, principal: Principal = Depends(current_user)) -> UserResponse:
    command = UpdateProfile(
        user_id=principal.id,
        name=body.name,
        phone_number=body.phone_number,
        gender=body.gender,
        avatar_url=body.avatar_url,
    )
    current_domain.process(command, asynchronous=False)
    return UserResponse.from_user(get_user(principal.id))


@user_router.delete("/profile", response_model=MessageResponse)
async def delete_profile(principal: Principal = Depends(current_user)) -> MessageResponse:
    current_domain.process(DeleteAccount(user_id=principal.id), asynchronous=False)
    return MessageResponse(message="Account deleted")


@user_router.post("/address", status_code=201, response_model=UserResponse)
async def add_address(body: AddAddressRequest, principal: Principal = Depends(current_user)) -> UserResponse:
    command = AddAddress(user_id=principal.id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return UserResponse.from_user(get_user(principal.id))


@user_router.put("/address/{address_id}", response_model=UserResponse)
async def update_address(
    address_id: str,
    body: UpdateAddressRequest,
    principal: Principal = Depends(current_user),
) -> UserResponse:
    command = UpdateAddress(user_id=principal.id, address_id=address_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return UserResponse.from_user(get_user(principal.id))


@user_router.delete("/address/{address_id}", response_model=UserResponse)
async def remove_address(address_id: str, principal: Principal = Depends(current_user)) -> UserResponse:
    current_domain.process(RemoveAddress(user_id=principal.id, address_id=address_id), asynchronous=False)
    return UserResponse.from_user(get_user(principal.id))


@user_router.get("/customers", response_model=CustomerListResponse)
async def browse_customers(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    sort_by: str = "created_at",
    sort_order: str = "asc",
    principal: Principal = Depends(require_admin),
) -> CustomerListResponse:
    total, customers = list_customers(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)
    return CustomerListResponse(
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit),
        data=[
            CustomerListItem(
                id=str(c.id),
                name=c.name,
                email=c.email,
                phone_number=c.phone_number,
                avatar_url=c.avatar_url,
                registration_date=c.created_at,
            )
            for c in customers
        ],
    )


@user_router.get("/customers/{user_id}/summary", response_model=CustomerSummaryResponse)
async def customer_summary(user_id: str, principal: Principal = Depends(require_admin)) -> CustomerSummaryResponse:
    customer = get_customer(user_id)
    return CustomerSummaryResponse.from_customer(customer, summary_for(user_id))


@user_router.get("/customers/{user_id}/orders", response_model=list[OrderResponse])
async def customer_orders(user_id: str, principal: Principal = Depends(require_admin)) -> list[OrderResponse]:
    get_customer(user_id)
    return [OrderResponse.from_order(o) for o in orders_of_user(user_id)]


@user_router.delete("/customers/{user_id}", response_model=MessageResponse)
async def delete_customer(user_id: str, principal: Principal = Depends(require_admin)) -> MessageResponse:
    name = current_domain.process(DeleteCustomer(user_id=user_id, actor_id=principal.id), asynchronous=False)
    return MessageResponse(message=f"User {name} deleted")


# ---------------------------------------------------------------------------
# Stats Router
# ---------------------------------------------------------------------------
stats_router = APIRouter(prefix="/stats", tags=["stats"])


@stats_router.post("/track-page-view", status_code=201, response_model=MessageResponse)
async def track_page_view(body: TrackPageViewRequest, request: Request) -> MessageResponse:
    command = TrackPageView(
        path=body.path,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    current_domain.process(command, asynchronous=False)
    return MessageResponse(message="Page view tracked")


@stats_router.get("/visitors", response_model=VisitorStatsResponse)
async def visitors() -> VisitorStatsResponse:
    return VisitorStatsResponse(**visitor_stats())
