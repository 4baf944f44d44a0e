from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from order_api.auth.dependencies import Principal
from order_api.auth.roles import require_role
from order_api.core.errors import envelope
from order_api.database import get_db
from order_api.models.order import Order
from order_api.services import orders_service
from order_api.services.orders_service import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, MAX_PAGE

router = APIRouter(tags=['orders'])


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    customer_name: str = Field(min_length=1)
    product_name: str = Field(min_length=1)
    product_category: str = Field(min_length=1)
    price: float = Field(ge=1)
    order_date: datetime

    @field_validator('customer_name', 'product_name', 'product_category')
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Value must not be empty.')
        return normalized

    @field_validator('order_date', mode='before')
    @classmethod
    def parse_plain_date(cls, value):
        if isinstance(value, str) and len(value) == 10:
            return datetime.combine(date.fromisoformat(value), datetime.min.time())
        return value

    @field_validator('order_date')
    @classmethod
    def normalize_order_date(cls, value: datetime) -> datetime:
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class OrderResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    customer_name: str
    product_name: str
    product_category: str
    price: float
    order_date: datetime
    created_by: str
    created_at: datetime
    updated_at: datetime


def serialize_order(order: Order) -> dict:
    return OrderResponse.model_validate(order).model_dump(by_alias=True, mode='json')


@router.post('', status_code=status.HTTP_201_CREATED)
def create_order(
    data: CreateOrderRequest,
    principal: Principal = Depends(require_role('create_order')),
    db: Session = Depends(get_db),
):
    order = orders_service.create_order(db, data.model_dump(), principal.email)
    return envelope('Order created successfully', status.HTTP_201_CREATED, serialize_order(order))


@router.get('/all')
def list_all_orders(
    page: int = Query(DEFAULT_PAGE, ge=1, le=MAX_PAGE),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    principal: Principal = Depends(require_role('list_all_orders')),
    db: Session = Depends(get_db),
):
    result = orders_service.list_all_orders(db, page, limit)
    return {
        'data': [serialize_order(order) for order in result['items']],
        'page': result['page'],
        'limit': result['limit'],
        'total': result['total'],
        'totalPages': result['total_pages'],
    }


@router.get('/my-orders')
def list_my_orders(
    principal: Principal = Depends(require_role('list_own_orders')),
    db: Session = Depends(get_db),
):
    orders = orders_service.list_own_orders(db, principal.email)
    return envelope('Customer orders retrieved', status.HTTP_200_OK, [serialize_order(order) for order in orders])


@router.delete('/{order_id}')
def delete_order(
    order_id: int,
    principal: Principal = Depends(require_role('delete_order')),
    db: Session = Depends(get_db),
):
    orders_service.delete_order(db, order_id, principal.role)
    return envelope('Order deleted successfully', status.HTTP_200_OK)


@router.get('/analytics/revenue')
def get_total_revenue(
    timeframe: str | None = None,
    principal: Principal = Depends(require_role('total_revenue')),
    db: Session = Depends(get_db),
):
    return envelope('Total revenue retrieved', status.HTTP_200_OK, orders_service.total_revenue(db, timeframe))


@router.get('/analytics/orders-count')
def get_order_count(
    timeframe: str | None = None,
    principal: Principal = Depends(require_role('order_count')),
    db: Session = Depends(get_db),
):
    return envelope('Total order count retrieved', status.HTTP_200_OK, orders_service.order_count(db, timeframe))


@router.get('/analytics/customers-count')
def get_unique_customers(
    timeframe: str | None = None,
    principal: Principal = Depends(require_role('unique_customers')),
    db: Session = Depends(get_db),
):
    return envelope(
        'Unique customers count retrieved',
        status.HTTP_200_OK,
        orders_service.unique_customers(db, timeframe),
    )


@router.get('/analytics/orders-by-category')
def get_orders_by_category(
    timeframe: str | None = None,
    principal: Principal = Depends(require_role('orders_by_category')),
    db: Session = Depends(get_db),
):
    result = orders_service.orders_by_category(db, timeframe)
    return envelope(f'Orders by category retrieved for {timeframe}', status.HTTP_200_OK, result)


@router.get('/analytics/revenue-trend')
def get_revenue_trend(
    principal: Principal = Depends(require_role('revenue_trend')),
    db: Session = Depends(get_db),
):
    return envelope('Revenue trend retrieved', status.HTTP_200_OK, orders_service.revenue_trend(db))
