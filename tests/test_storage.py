from core.models import COLUMNS, Item


def test_columns_in_storage_order():
    assert COLUMNS == (
        "external_id",
        "title",
        "downloads",
        "description",
        "category",
        "category_name",
        "rating",
        "user_ratings",
        "pricing",
    )


def test_find_missing_returns_none(store):
    assert store.find_by_external_id("nope") is None
    assert store.count() == 0


def test_upsert_inserts_then_updates(store):
    first = Item(external_id="abc", title="Old", downloads=10, rating=3.0)
    store.upsert(first)
    assert store.count() == 1

    second = Item(
        external_id="abc",
        title="New",
        downloads=20,
        description="desc",
        category="ext/games",
        category_name="Games",
        rating=4.5,
        user_ratings=7,
        pricing="Free",
    )
    store.upsert(second)

    assert store.count() == 1
    assert store.find_by_external_id("abc") == second


def test_all_returns_insertion_order(store):
    for ext_id in ("b", "a", "c"):
        store.upsert(Item(external_id=ext_id))
    store.upsert(Item(external_id="b", title="again"))

    assert [it.external_id for it in store.all()] == ["b", "a", "c"]
    assert store.all()[0].title == "again"


def test_ensure_db_is_idempotent(store):
    store.upsert(Item(external_id="keep"))
    store.ensure_db()
    assert store.count() == 1
