"""Pydantic request/response schemas for the marketplace API.

These are external contracts, kept separate from the Protean commands they
are translated into.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class MessageResponse(BaseModel):
    message: str


class DimensionsSchema(BaseModel):
    height: float | None = Field(default=None, ge=0)
    length: float | None = Field(default=None, ge=0)
    width: float | None = Field(default=None, ge=0)


class AddressFields(BaseModel):
    recipient_name: str = Field(min_length=1)
    phone_number: str = Field(min_length=1)
    street_address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    province: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class AddProductRequest(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: float = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    discount: float = Field(default=0.0, ge=0, le=100)
    unit: str = Field(default="kg", description="kg or ekor")
    weight: float | None = Field(default=None, ge=0)
    dimensions: DimensionsSchema | None = None
    sizes: list[str] = []
    colors: list[str] = []
    image_url: str | None = None
    is_published: bool = False

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Ikan Nila Segar",
                    "description": "Fresh tilapia, cleaned",
                    "price": 35000,
                    "stock": 20,
                    "discount": 10,
                    "sizes": ["500g", "1kg"],
                    "is_published": True,
                }
            ]
        }
    }


class UpdateProductRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    discount: float | None = Field(default=None, ge=0, le=100)
    unit: str | None = Field(default=None, description="kg or ekor")
    weight: float | None = Field(default=None, ge=0)
    dimensions: DimensionsSchema | None = None
    sizes: list[str] | None = None
    colors: list[str] | None = None
    image_url: str | None = None


class PublishRequest(BaseModel):
    is_published: bool


class AdjustStockRequest(BaseModel):
    change_type: str = Field(description="penambahan or koreksi")
    quantity_change: int
    size: str | None = None
    color: str | None = None
    note: str | None = None


class ProductResponse(BaseModel):
    id: str
    name: str
    description: str
    price: float
    discount: float
    discounted_price: float
    unit: str
    stock: int
    weight: float | None = None
    dimensions: DimensionsSchema | None = None
    sizes: list[str]
    colors: list[str]
    image_url: str | None = None
    is_published: bool
    seller_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_product(cls, product):
        dimensions = product.dimensions
        return cls(
            id=str(product.id),
            name=product.name,
            description=product.description,
            price=product.price,
            discount=product.discount or 0.0,
            discounted_price=product.discounted_price,
            unit=product.unit or "kg",
            stock=product.stock,
            weight=product.weight,
            dimensions=(
                DimensionsSchema(height=dimensions.height, length=dimensions.length, width=dimensions.width)
                if dimensions
                else None
            ),
            sizes=product.size_options,
            colors=product.color_options,
            image_url=product.image_url,
            is_published=bool(product.is_published),
            seller_id=str(product.seller_id),
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class StockHistoryResponse(BaseModel):
    id: str
    product_id: str
    size: str
    color: str
    change_type: str
    quantity_change: int
    stock_after_change: int
    note: str
    related_order_id: str | None = None
    action_by: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_record(cls, record):
        return cls(
            id=str(record.id),
            product_id=str(record.product_id),
            size=record.size,
            color=record.color,
            change_type=record.change_type,
            quantity_change=record.quantity_change,
            stock_after_change=record.stock_after_change,
            note=record.note or "",
            related_order_id=str(record.related_order_id) if record.related_order_id else None,
            action_by=str(record.action_by) if record.action_by else None,
            created_at=record.created_at,
        )


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class CartItemRequest(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(gt=0)
    size: str | None = None
    color: str | None = None
    expected_version: int | None = None


class CartItemResponse(BaseModel):
    product_id: str
    quantity: int
    size: str
    color: str


class CartResponse(BaseModel):
    user_id: str
    items: list[CartItemResponse]
    version: int
    updated_at: datetime | None = None

    @classmethod
    def from_cart(cls, cart):
        return cls(
            user_id=str(cart.user_id),
            items=[
                CartItemResponse(
                    product_id=str(item.product_id),
                    quantity=item.quantity,
                    size=item.size,
                    color=item.color,
                )
                for item in cart.items
            ],
            version=cart.version or 0,
            updated_at=cart.updated_at,
        )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class BuyNowItem(BaseModel):
    product_id: str
    quantity: int = Field(gt=0)
    size: str | None = None
    color: str | None = None
    unit: str | None = Field(default=None, description="kg or ekor; must match the product")


class CheckoutRequest(BaseModel):
    shipping_address: AddressFields
    payment_method: str = Field(description="bank_jateng, cod or qris")
    shipping_cost: float = Field(default=0.0, ge=0)
    checkout_id: str | None = None
    proof_of_payment_url: str | None = None
    source: str = Field(default="cart", description="cart or buyNow")
    items: list[BuyNowItem] | None = Field(default=None, description="Lines bought directly when source is buyNow")


class PayOrderRequest(BaseModel):
    proof_of_payment_url: str | None = None


class SetOrderStatusRequest(BaseModel):
    status: str
    tracking_number: str | None = None
    shipping_method: str | None = None
    cod_proof_url: str | None = None


class OrderItemResponse(BaseModel):
    product_id: str
    product_name: str
    quantity: int
    unit_price: float
    discount: float
    discounted_price: float
    size: str
    color: str
    unit: str


class OrderResponse(BaseModel):
    id: str
    user_id: str
    items: list[OrderItemResponse]
    shipping_address: AddressFields | None = None
    shipping_cost: float
    shipping_method: str | None = None
    payment_method: str
    total_amount: float
    status: str
    source: str
    tracking_number: str | None = None
    proof_of_payment_url: str | None = None
    cod_proof_url: str | None = None
    checkout_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order):
        address = order.shipping_address
        return cls(
            id=str(order.id),
            user_id=str(order.user_id),
            items=[
                OrderItemResponse(
                    product_id=str(item.product_id),
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    discount=item.discount or 0.0,
                    discounted_price=item.discounted_price,
                    size=item.size,
                    color=item.color,
                    unit=item.unit,
                )
                for item in order.items
            ],
            shipping_address=(
                AddressFields(
                    recipient_name=address.recipient_name,
                    phone_number=address.phone_number,
                    street_address=address.street_address,
                    city=address.city,
                    province=address.province,
                    postal_code=address.postal_code,
                )
                if address
                else None
            ),
            shipping_cost=order.shipping_cost or 0.0,
            shipping_method=order.shipping_method,
            payment_method=order.payment_method,
            total_amount=order.total_amount,
            status=order.status,
            source=order.source or "cart",
            tracking_number=order.tracking_number,
            proof_of_payment_url=order.proof_of_payment_url,
            cod_proof_url=order.cod_proof_url,
            checkout_id=order.checkout_id,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class RegisterUserRequest(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    phone_number: str = Field(min_length=1)
    gender: str | None = None
    avatar_url: str | None = None


class UpdateProfileRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    phone_number: str | None = Field(default=None, min_length=1)
    gender: str | None = None
    avatar_url: str | None = None


class AddAddressRequest(AddressFields):
    is_primary: bool = False


class UpdateAddressRequest(BaseModel):
    recipient_name: str | None = None
    phone_number: str | None = None
    street_address: str | None = None
    city: str | None = None
    province: str | None = None
    postal_code: str | None = None
    is_primary: bool | None = None


class AddressResponse(AddressFields):
    id: str
    is_primary: bool


def _address_response(address):
    return AddressResponse(
        id=str(address.id),
        recipient_name=address.recipient_name,
        phone_number=address.phone_number,
        street_address=address.street_address,
        city=address.city,
        province=address.province,
        postal_code=address.postal_code,
        is_primary=bool(address.is_primary),
    )


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    phone_number: str
    gender: str | None = None
    role: str
    avatar_url: str | None = None
    addresses: list[AddressResponse]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_user(cls, user):
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email,
            phone_number=user.phone_number,
            gender=user.gender,
            role=user.role,
            avatar_url=user.avatar_url,
            addresses=[_address_response(a) for a in user.addresses],
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class CustomerListItem(BaseModel):
    id: str
    name: str
    email: str
    phone_number: str
    avatar_url: str | None = None
    registration_date: datetime | None = None


class CustomerListResponse(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int
    data: list[CustomerListItem]


class OrderSummarySchema(BaseModel):
    total_orders: int = 0
    completed: int = 0
    processing: int = 0
    cancelled: int = 0
    total_spent: float = 0.0


class CustomerSummaryResponse(BaseModel):
    id: str
    name: str
    email: str
    phone_number: str
    gender: str | None = None
    avatar_url: str | None = None
    registration_date: datetime | None = None
    address: AddressResponse | None = None
    order_summary: OrderSummarySchema

    @classmethod
    def from_customer(cls, user, summary):
        primary = user.primary_address
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email,
            phone_number=user.phone_number,
            gender=user.gender,
            avatar_url=user.avatar_url,
            registration_date=user.created_at,
            address=_address_response(primary) if primary else None,
            order_summary=OrderSummarySchema(
                total_orders=summary.total_orders or 0,
                completed=summary.completed or 0,
                processing=summary.processing or 0,
                cancelled=summary.cancelled or 0,
                total_spent=summary.total_spent or 0.0,
            ),
        )


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------
class TrackPageViewRequest(BaseModel):
    path: str | None = None


class VisitorStatsResponse(BaseModel):
    today: int
    yesterday: int
    this_week: int
    this_month: int
    this_year: int
    total: int
