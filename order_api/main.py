import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from order_api.core import config
from order_api.core.errors import envelope, register_exception_handlers
from order_api.database import Base, engine, ensure_orders_schema
from order_api.models import order, user  # noqa: F401  (register tables on Base)
from order_api.routes import auth_routes, order_routes

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title='Order Management API',
    description='API for managing orders and dashboard analytics',
    version='1.0',
    docs_url='/api/docs',
    openapi_url='/api/docs/openapi.json',
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['GET', 'HEAD', 'PUT', 'PATCH', 'POST', 'DELETE'],
    allow_headers=['Content-Type', 'Authorization'],
)

register_exception_handlers(app)


@app.middleware('http')
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info('%s %s %s %.1fms', request.method, request.url.path, response.status_code, elapsed_ms)
    return response


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_orders_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL.')
    logger.info('server started on http://localhost:%s%s', config.PORT, config.API_PREFIX)


@app.get('/')
def root():
    return envelope('Order Management API Running', 200, {'status': 'ok'})


@app.get('/health')
def health():
    return envelope('OK', 200, {'status': 'ok'})


app.include_router(auth_routes.router, prefix=f'{config.API_PREFIX}/auth')
app.include_router(order_routes.router, prefix=f'{config.API_PREFIX}/orders')


def run() -> None:
    import uvicorn

    uvicorn.run('order_api.main:app', host='0.0.0.0', port=config.PORT)


if __name__ == '__main__':
    run()
