"""Tests for the in-memory stores and CSV loaders."""

from datetime import datetime, timedelta, timezone

import pytest

from src.recommender.models import RETENTION_DAYS, ProductAggregate
from src.recommender.stores import (
    InMemoryInteractionStore,
    InMemoryUserDirectory,
    load_catalog_csv,
    load_interactions_csv,
)
from src.recommender.weights import InteractionType


# ===== Interaction store =====


def test_aggregate_by_product(interaction_store):
    aggregates = {a.product_id: a for a in interaction_store.aggregate_by_product()}

    assert aggregates["p1"] == ProductAggregate("p1", 11.0, 2, 3)
    assert aggregates["p4"] == ProductAggregate("p4", 3.0, 0, 1)
    assert len(aggregates) == 9


def test_aggregate_keeps_first_appearance_order(interaction_store):
    order = [a.product_id for a in interaction_store.aggregate_by_product()]

    assert order == ["p1", "p2", "p3", "p4", "p5", "p6", "p8", "p9", "p10"]


def test_aggregate_filters_users_and_excludes_product(interaction_store):
    aggregates = interaction_store.aggregate_by_product(
        user_ids={"u1", "u2"}, exclude_product_id="p1"
    )

    assert [(a.product_id, a.total_weight) for a in aggregates] == [
        ("p2", 3.0),
        ("p3", 1.0),
        ("p4", 3.0),
    ]


def test_aggregate_with_no_matches(interaction_store):
    assert interaction_store.aggregate_by_product(user_ids=set()) == []
    assert InMemoryInteractionStore().aggregate_by_product() == []


def test_find_by_user_and_product(interaction_store):
    assert [i.product_id for i in interaction_store.find_by_user("u1")] == ["p1", "p2", "p3"]
    assert {i.user_id for i in interaction_store.find_by_product("p1")} == {"u1", "u2", "u3"}


def test_delete_by_user(interaction_store):
    assert interaction_store.delete_by_user("u5") == 3
    assert interaction_store.find_by_user("u5") == []
    assert interaction_store.delete_by_user("u5") == 0


def test_delete_older_than_returns_expired(make_interaction):
    now = datetime.now(timezone.utc)
    old = make_interaction("u1", "p1", "view", created_at=now - timedelta(days=10))
    new = make_interaction("u1", "p2", "view", created_at=now)
    store = InMemoryInteractionStore([old, new])

    expired = store.delete_older_than(now - timedelta(days=1))

    assert expired == [old]
    assert store.find_all() == [new]


def test_reads_skip_interactions_outside_retention(make_interaction):
    now = datetime.now(timezone.utc)
    expired = make_interaction("u1", "p1", "purchase", created_at=now - timedelta(days=181))
    live = make_interaction("u1", "p2", "view", created_at=now - timedelta(days=179))
    store = InMemoryInteractionStore([expired, live])

    assert store.find_all() == [live]
    assert store.find_by_user("u1") == [live]
    assert store.find_by_product("p1") == []
    assert [a.product_id for a in store.aggregate_by_product()] == ["p2"]
    # still physically present until purged
    assert len(store) == 2


def test_retention_follows_store_clock(make_interaction):
    created = datetime(2024, 1, 1, tzinfo=timezone.utc)
    interaction = make_interaction("u1", "p1", "view", created_at=created)
    clock_now = [created + timedelta(days=RETENTION_DAYS - 1)]
    store = InMemoryInteractionStore([interaction], clock=lambda: clock_now[0])

    assert store.find_all() == [interaction]

    clock_now[0] = created + timedelta(days=RETENTION_DAYS, seconds=1)
    assert store.find_all() == []


def test_retention_can_be_disabled(make_interaction):
    old = make_interaction("u1", "p1", "view", created_at=datetime(2000, 1, 1, tzinfo=timezone.utc))
    store = InMemoryInteractionStore([old], retention_days=None)

    assert store.find_all() == [old]


def test_user_directory_find_existing():
    users = InMemoryUserDirectory(["u1", "u2"])
    users.remove("u2")
    users.add("u3")

    assert users.find_existing(["u1", "u2", "u3", "u4"]) == {"u1", "u3"}


# ===== Catalog =====


def test_catalog_find_by_ids_skips_unknown(catalog):
    found = catalog.find_by_ids(["p2", "missing", "p1"])

    assert {p.id for p in found} == {"p1", "p2"}


def test_catalog_find_by_category(catalog):
    laptops = catalog.find_by_category("laptops", exclude_id="p2", limit=2)

    assert [p.id for p in laptops] == ["p1", "p3"]


def test_catalog_remove(catalog):
    assert catalog.remove("p1") is True
    assert catalog.remove("p1") is False
    assert catalog.find_by_id("p1") is None


# ===== CSV loaders =====


def test_load_interactions_csv(tmp_path):
    csv_file = tmp_path / "interactions.csv"
    csv_file.write_text(
        "user_id,product_id,type,timestamp,session_id,source,duration\n"
        "1,p1,view,2024-01-01T00:00:00Z,s1,search,12.5\n"
        "1,p2,purchase,2024-01-02T00:00:00Z,,,\n"
        "2,p1,like,2024-01-03T00:00:00Z,s2,home,\n"
    )

    interactions = load_interactions_csv(str(csv_file))

    assert len(interactions) == 2
    view, purchase = interactions
    assert view.user_id == "1"
    assert view.type == InteractionType.VIEW
    assert view.weight == 1
    assert view.metadata.session_id == "s1"
    assert view.metadata.duration == 12.5
    assert view.created_at == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert purchase.weight == 5
    assert purchase.metadata.session_id is None
    assert purchase.metadata.source is None


def test_load_interactions_csv_without_optional_columns(tmp_path):
    csv_file = tmp_path / "interactions.csv"
    csv_file.write_text("user_id,product_id,type\nu1,p1,click\n")

    interactions = load_interactions_csv(str(csv_file))

    assert len(interactions) == 1
    assert interactions[0].weight == 2
    assert interactions[0].created_at.tzinfo is not None


def test_load_interactions_csv_missing_columns(tmp_path):
    csv_file = tmp_path / "interactions.csv"
    csv_file.write_text("user_id,product_id\nu1,p1\n")

    with pytest.raises(ValueError, match="missing required columns"):
        load_interactions_csv(str(csv_file))


def test_load_interactions_csv_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_interactions_csv(str(tmp_path / "nope.csv"))


def test_load_catalog_csv(tmp_path):
    csv_file = tmp_path / "catalog.csv"
    csv_file.write_text(
        "product_id,name,category,price,brand,color\n"
        "p1,Acme Laptop,laptops,999.0,Acme,silver\n"
        "p2,USB-C Cable,accessories,,,black\n"
    )

    laptop, cable = load_catalog_csv(str(csv_file))

    assert laptop.id == "p1"
    assert laptop.price == 999.0
    assert laptop.brand == "Acme"
    assert laptop.attributes == {"color": "silver"}
    assert cable.price == 0.0
    assert cable.brand is None


def test_load_catalog_csv_missing_columns(tmp_path):
    csv_file = tmp_path / "catalog.csv"
    csv_file.write_text("product_id,name\np1,Acme Laptop\n")

    with pytest.raises(ValueError):
        load_catalog_csv(str(csv_file))
