import logging
import math
from datetime import datetime

from sqlalchemy import distinct, extract, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from order_api.auth.roles import ADMIN
from order_api.core.errors import (
    BadRequestError,
    DatabaseUnavailableError,
    ForbiddenError,
    NotFoundError,
)
from order_api.models.order import Order
from order_api.services.timeframes import (
    TIMEFRAMES,
    comparison_timeframe,
    percentage_change,
    resolve_timeframe,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_PAGE = 1_000_000
MAX_LIMIT = 100


def _within(query: Query, bounds: tuple[datetime, datetime] | None) -> Query:
    if bounds is None:
        return query
    start, end = bounds
    return query.filter(Order.order_date >= start, Order.order_date <= end)


def create_order(db: Session, data: dict, creator_email: str) -> Order:
    values = {key: value for key, value in data.items() if key != 'created_by'}
    order = Order(**values, created_by=creator_email)
    try:
        db.add(order)
        db.commit()
        db.refresh(order)
    except SQLAlchemyError as exc:
        db.rollback()
        raise DatabaseUnavailableError() from exc

    logger.info('Order %s created by %s', order.id, creator_email)
    return order


def list_all_orders(db: Session, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> dict:
    """Page through every order, newest order date first."""
    if not 1 <= page <= MAX_PAGE or not 1 <= limit <= MAX_LIMIT:
        raise BadRequestError('Invalid pagination parameters')

    try:
        orders = (
            db.query(Order)
            .order_by(Order.order_date.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        total = db.query(func.count(Order.id)).scalar() or 0
    except SQLAlchemyError as exc:
        raise DatabaseUnavailableError() from exc

    return {
        'items': orders,
        'page': page,
        'limit': limit,
        'total': total,
        'total_pages': math.ceil(total / limit),
    }


def list_own_orders(db: Session, creator_email: str) -> list[Order]:
    try:
        return db.query(Order).filter(Order.created_by == creator_email).all()
    except SQLAlchemyError as exc:
        raise DatabaseUnavailableError() from exc


def delete_order(db: Session, order_id: int, requester_role: str) -> None:
    if requester_role != ADMIN:
        raise ForbiddenError('Only admins can delete orders')

    try:
        order = db.get(Order, order_id)
        if order is None:
            raise NotFoundError('Order not found')

        db.delete(order)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise DatabaseUnavailableError() from exc

    logger.info('Order %s deleted', order_id)


def _revenue(db: Session, bounds) -> float:
    query = db.query(func.coalesce(func.sum(Order.price), 0.0))
    return float(_within(query, bounds).scalar() or 0)


def _count(db: Session, bounds) -> int:
    query = db.query(func.count(Order.id))
    return int(_within(query, bounds).scalar() or 0)


def _unique_customers(db: Session, bounds) -> int:
    query = db.query(func.count(distinct(Order.customer_name)))
    return int(_within(query, bounds).scalar() or 0)


def _compare(db: Session, measure, timeframe: str | None, now: datetime | None) -> tuple:
    current_bounds = resolve_timeframe(timeframe, now)
    previous_bounds = resolve_timeframe(comparison_timeframe(timeframe), now)
    try:
        current = measure(db, current_bounds)
        previous = measure(db, previous_bounds)
    except SQLAlchemyError as exc:
        raise DatabaseUnavailableError() from exc
    return current, percentage_change(current, previous)


def total_revenue(db: Session, timeframe: str | None, now: datetime | None = None) -> dict:
    revenue, change = _compare(db, _revenue, timeframe, now)
    return {'totalRevenue': revenue, 'percentageChange': change}


def order_count(db: Session, timeframe: str | None, now: datetime | None = None) -> dict:
    count, change = _compare(db, _count, timeframe, now)
    return {'orderCount': count, 'percentageChange': change}


def unique_customers(db: Session, timeframe: str | None, now: datetime | None = None) -> dict:
    count, change = _compare(db, _unique_customers, timeframe, now)
    return {'uniqueCustomers': count, 'percentageChange': change}


def orders_by_category(db: Session, timeframe: str | None, now: datetime | None = None) -> list[dict]:
    """Count orders per category; the timeframe is mandatory here."""
    if timeframe not in TIMEFRAMES:
        raise BadRequestError('Invalid timeframe')

    order_total = func.count(Order.id).label('order_total')
    query = db.query(Order.product_category, order_total)
    query = _within(query, resolve_timeframe(timeframe, now))
    try:
        rows = query.group_by(Order.product_category).order_by(order_total.desc()).all()
    except SQLAlchemyError as exc:
        raise DatabaseUnavailableError() from exc

    return [{'category': category, 'count': int(total)} for category, total in rows]


def revenue_trend(db: Session) -> list[dict]:
    # Grouped by month of year only, so the same month of different years is summed together.
    month = extract('month', Order.order_date).label('month')
    try:
        rows = (
            db.query(month, func.sum(Order.price).label('revenue'))
            .group_by(month)
            .order_by(month)
            .all()
        )
    except SQLAlchemyError as exc:
        raise DatabaseUnavailableError() from exc

    return [{'month': int(value), 'revenue': float(revenue)} for value, revenue in rows]
