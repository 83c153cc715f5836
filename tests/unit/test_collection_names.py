from app.infrastructure.sync.collection_names import resolve_collection_name


def test_mapped_name_is_used() -> None:
    assert resolve_collection_name("users", {"users": "app_users"}) == "app_users"


def test_unmapped_name_passes_through() -> None:
    assert resolve_collection_name("orders", {"users": "app_users"}) == "orders"
    assert resolve_collection_name("orders", {}) == "orders"
