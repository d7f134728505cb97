from sqlalchemy import inspect
from storage.db import drop_db, setup_db


def test_drop_and_recreate(engine):
    drop_db(engine)
    assert inspect(engine).get_table_names() == []

    setup_db(engine)
    assert set(inspect(engine).get_table_names()) == {"products", "orders", "order_items"}
