from datetime import datetime

import pytest
from pydantic import ValidationError

from order_api.core.errors import NotFoundError
from order_api.models.order import Order
from order_api.routes import order_routes
from order_api.routes.order_routes import CreateOrderRequest

ORDERS_URL = '/api/v1/orders'

ORDER_PAYLOAD = {
    'customerName': 'John Doe',
    'productName': 'Laptop',
    'productCategory': 'Electronics',
    'price': 1200,
    'orderDate': '2024-02-17',
}


def test_create_order_request_accepts_plain_date() -> None:
    request = CreateOrderRequest(**ORDER_PAYLOAD)

    assert request.order_date == datetime(2024, 2, 17)
    assert request.customer_name == 'John Doe'


def test_create_order_request_normalizes_aware_datetime_to_utc() -> None:
    request = CreateOrderRequest(**{**ORDER_PAYLOAD, 'orderDate': '2024-02-17T10:00:00+02:00'})

    assert request.order_date == datetime(2024, 2, 17, 8, 0)


@pytest.mark.parametrize(
    'overrides',
    [
        {'price': 0},
        {'customerName': '   '},
        {'productCategory': ''},
        {'orderDate': 'yesterday'},
    ],
)
def test_create_order_request_rejects_invalid_fields(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        CreateOrderRequest(**{**ORDER_PAYLOAD, **overrides})


def test_create_order_request_drops_client_creator() -> None:
    request = CreateOrderRequest(**{**ORDER_PAYLOAD, 'createdBy': 'spoofed@shop.com'})

    assert 'created_by' not in request.model_dump()


def test_protected_route_requires_token(client) -> None:
    response = client.get(f'{ORDERS_URL}/my-orders')

    assert response.status_code == 401
    assert response.json() == {'message': 'Missing bearer token', 'code': 401, 'data': None}


def test_protected_route_rejects_garbage_token(client) -> None:
    response = client.get(f'{ORDERS_URL}/my-orders', headers={'Authorization': 'Bearer not.a.jwt'})

    assert response.status_code == 401
    assert response.json()['message'] == 'Invalid token'


def test_customer_creates_order_owned_by_caller(client, customer_headers) -> None:
    response = client.post(
        ORDERS_URL,
        json={**ORDER_PAYLOAD, 'createdBy': 'spoofed@shop.com'},
        headers=customer_headers,
    )

    body = response.json()
    assert response.status_code == 201
    assert body['message'] == 'Order created successfully'
    assert body['data']['createdBy'] == 'customer@shop.com'
    assert body['data']['productCategory'] == 'Electronics'
    assert body['data']['orderDate'] == '2024-02-17T00:00:00'
    assert 'createdAt' in body['data']


def test_admin_cannot_create_order(client, admin_headers) -> None:
    response = client.post(ORDERS_URL, json=ORDER_PAYLOAD, headers=admin_headers)

    assert response.status_code == 403
    assert response.json() == {'message': 'Access Denied', 'code': 403, 'data': None}


def test_create_order_with_low_price_is_bad_request(client, customer_headers) -> None:
    response = client.post(ORDERS_URL, json={**ORDER_PAYLOAD, 'price': 0.5}, headers=customer_headers)

    body = response.json()
    assert response.status_code == 400
    assert body['data'][0]['field'] == 'price'


def test_list_all_orders_returns_pagination_fields(client, admin_headers, add_order) -> None:
    for day in range(1, 26):
        add_order(order_date=datetime(2026, 1, day))

    response = client.get(f'{ORDERS_URL}/all', params={'page': 2, 'limit': 10}, headers=admin_headers)

    body = response.json()
    assert response.status_code == 200
    assert len(body['data']) == 10
    assert body['page'] == 2
    assert body['limit'] == 10
    assert body['total'] == 25
    assert body['totalPages'] == 3


def test_list_all_orders_rejects_zero_limit(client, admin_headers) -> None:
    response = client.get(f'{ORDERS_URL}/all', params={'limit': 0}, headers=admin_headers)

    assert response.status_code == 400


@pytest.mark.parametrize(
    'params',
    [
        {'page': 10000000000000000000},
        {'page': 1000001},
        {'limit': 101},
    ],
)
def test_list_all_orders_rejects_out_of_range_pagination(client, admin_headers, params: dict) -> None:
    response = client.get(f'{ORDERS_URL}/all', params=params, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()['message'] == 'Validation failed'


def test_customer_cannot_list_all_orders(client, customer_headers) -> None:
    response = client.get(f'{ORDERS_URL}/all', headers=customer_headers)

    assert response.status_code == 403


def test_my_orders_only_returns_callers_orders(client, customer_headers, add_order) -> None:
    add_order(created_by='customer@shop.com', product_name='Laptop')
    add_order(created_by='other@shop.com', product_name='Phone')

    response = client.get(f'{ORDERS_URL}/my-orders', headers=customer_headers)

    body = response.json()
    assert response.status_code == 200
    assert body['message'] == 'Customer orders retrieved'
    assert [order['productName'] for order in body['data']] == ['Laptop']


def test_delete_order_route_returns_not_found(db, admin) -> None:
    with pytest.raises(NotFoundError) as exception_info:
        order_routes.delete_order(order_id=999, principal=admin, db=db)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Order not found'


def test_admin_deletes_order(client, admin_headers, add_order, db) -> None:
    order_id = add_order().id

    response = client.delete(f'{ORDERS_URL}/{order_id}', headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {'message': 'Order deleted successfully', 'code': 200, 'data': None}
    assert db.query(Order).filter(Order.id == order_id).first() is None


def test_customer_cannot_delete_order(client, customer_headers, add_order) -> None:
    order_id = add_order().id

    response = client.delete(f'{ORDERS_URL}/{order_id}', headers=customer_headers)

    assert response.status_code == 403


def test_revenue_analytics_envelope(client, admin_headers, add_order) -> None:
    add_order(price=10, order_date=datetime(2023, 1, 15))

    response = client.get(f'{ORDERS_URL}/analytics/revenue', headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {
        'message': 'Total revenue retrieved',
        'code': 200,
        'data': {'totalRevenue': 10, 'percentageChange': 100},
    }


def test_orders_count_and_customers_count_routes(client, admin_headers, add_order) -> None:
    add_order(customer_name='Alice', order_date=datetime(2023, 1, 15))
    add_order(customer_name='Alice', order_date=datetime(2023, 2, 15))

    count = client.get(f'{ORDERS_URL}/analytics/orders-count', headers=admin_headers).json()
    customers = client.get(f'{ORDERS_URL}/analytics/customers-count', headers=admin_headers).json()

    assert count['data']['orderCount'] == 2
    assert customers['message'] == 'Unique customers count retrieved'
    assert customers['data']['uniqueCustomers'] == 1


def test_orders_by_category_rejects_unknown_timeframe(client, admin_headers) -> None:
    response = client.get(
        f'{ORDERS_URL}/analytics/orders-by-category',
        params={'timeframe': 'forever'},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json() == {'message': 'Invalid timeframe', 'code': 400, 'data': None}


def test_orders_by_category_message_names_timeframe(client, admin_headers) -> None:
    response = client.get(
        f'{ORDERS_URL}/analytics/orders-by-category',
        params={'timeframe': 'lastYear'},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()['message'] == 'Orders by category retrieved for lastYear'


def test_revenue_trend_route(client, admin_headers, add_order) -> None:
    add_order(price=10, order_date=datetime(2023, 1, 15))
    add_order(price=20, order_date=datetime(2024, 1, 20))

    response = client.get(f'{ORDERS_URL}/analytics/revenue-trend', headers=admin_headers)

    assert response.status_code == 200
    assert response.json()['data'] == [{'month': 1, 'revenue': 30.0}]


def test_health_probe_is_unprefixed(client) -> None:
    response = client.get('/health')

    assert response.status_code == 200
    assert response.json()['data'] == {'status': 'ok'}
