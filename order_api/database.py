from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from order_api.core import config


def build_engine(url: str, **kwargs):
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, **kwargs)


engine = build_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_orders_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_orders_schema() -> None:
    global _orders_schema_checked

    if _orders_schema_checked:
        return

    with _schema_lock:
        if _orders_schema_checked:
            return

        inspector = inspect(engine)

        if 'orders' not in inspector.get_table_names():
            _orders_schema_checked = True
            return

        with engine.begin() as connection:
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_orders_order_date ON orders(order_date)')
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_orders_created_by_date ON orders(created_by, order_date)')
            )
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_orders_category_date ON orders(product_category, order_date)')
            )

        _orders_schema_checked = True
