from decimal import Decimal

import pytest

from catalog_api.services.errors import ProductNotFoundError
from catalog_api.services.product_query import (
    ProductPage,
    ProductQuery,
    get_product,
    list_products,
)


@pytest.fixture
def priced_products(add_product):
    return [
        add_product(name="Cheap", price=5, category="Tools"),
        add_product(name="Middle", price=10, category="Tools"),
        add_product(name="Pricey", price=15, category="Garden"),
    ]


def test_query_defaults_and_normalisation():
    params = ProductQuery(page=0, sort_order="DESC", search=" bolt ")
    assert params.page == 1
    assert params.page_size == 100
    assert params.sort_column == "name"
    assert params.sort_order == "desc"
    assert params.search == " bolt "
    assert params.offset == 0

    assert ProductQuery(page=-4).page == 1
    assert ProductQuery(sort_order="sideways").sort_order == "asc"
    assert ProductQuery(page=3, page_size=20).offset == 40


def test_total_pages_uses_ceiling_division():
    assert ProductPage(total_count=0, page=1, page_size=10).total_pages == 0
    assert ProductPage(total_count=10, page=1, page_size=10).total_pages == 1
    assert ProductPage(total_count=11, page=1, page_size=10).total_pages == 2
    assert ProductPage(total_count=1, page=1, page_size=100).total_pages == 1


def test_price_range_is_inclusive_and_counts_filtered_rows(db_session, priced_products):
    result = list_products(
        db_session, ProductQuery(min_price=Decimal("7"), max_price=Decimal("12"))
    )
    assert result.total_count == 1
    assert [p.name for p in result.items] == ["Middle"]

    result = list_products(
        db_session, ProductQuery(min_price=Decimal("10"), max_price=Decimal("15"))
    )
    assert sorted(p.name for p in result.items) == ["Middle", "Pricey"]


def test_pagination_applies_after_sorting(db_session, priced_products):
    result = list_products(
        db_session, ProductQuery(page=2, page_size=1, sort_column="price")
    )
    assert result.total_count == 3
    assert result.total_pages == 3
    assert [p.name for p in result.items] == ["Middle"]

    result = list_products(
        db_session,
        ProductQuery(page=1, page_size=2, sort_column="Price", sort_order="desc"),
    )
    assert [p.name for p in result.items] == ["Pricey", "Middle"]


def test_total_count_is_independent_of_page(db_session, priced_products):
    counts = {
        list_products(db_session, ProductQuery(page=page, page_size=2)).total_count
        for page in (1, 2, 3, 10)
    }
    assert counts == {3}
    assert list_products(db_session, ProductQuery(page=10, page_size=2)).items == []


def test_unknown_sort_column_falls_back_to_name(db_session, add_product):
    add_product(name="Bravo", price=1)
    add_product(name="Alpha", price=3)
    add_product(name="Charlie", price=2)

    asc = list_products(db_session, ProductQuery(sort_column="colour"))
    assert [p.name for p in asc.items] == ["Alpha", "Bravo", "Charlie"]

    desc = list_products(db_session, ProductQuery(sort_column="colour", sort_order="desc"))
    assert [p.name for p in desc.items] == ["Charlie", "Bravo", "Alpha"]


def test_sort_by_stock_quantity_is_case_insensitive(db_session, add_product):
    add_product(name="A", stock_quantity=30)
    add_product(name="B", stock_quantity=10)
    add_product(name="C", stock_quantity=20)

    result = list_products(db_session, ProductQuery(sort_column="STOCKQUANTITY"))
    assert [p.stock_quantity for p in result.items] == [10, 20, 30]


def test_search_matches_any_text_column_case_insensitively(db_session, add_product):
    add_product(name="Hammer", description="Steel head", category="Tools")
    add_product(name="Rake", description="Leaf rake", category="Garden")
    add_product(name="Drill", description="Cordless", manufacturer="Bosch")

    def names(term):
        return sorted(p.name for p in list_products(db_session, ProductQuery(search=term)).items)

    assert names("hammer") == ["Hammer"]
    assert names("LEAF") == ["Rake"]
    assert names("garden") == ["Rake"]
    assert names("bosch") == ["Drill"]
    assert names("nothing-like-this") == []


def test_search_treats_wildcards_literally(db_session, add_product):
    add_product(name="100% cotton rag")
    add_product(name="Plain rag")

    result = list_products(db_session, ProductQuery(search="100%"))
    assert [p.name for p in result.items] == ["100% cotton rag"]

    result = list_products(db_session, ProductQuery(search="_"))
    assert result.items == []


def test_category_filter_is_exact(db_session, add_product):
    add_product(name="Saw", category="Tools")
    add_product(name="Toolbox", category="Tools & Storage")

    result = list_products(db_session, ProductQuery(category="Tools"))
    assert [p.name for p in result.items] == ["Saw"]


def test_active_filter(db_session, add_product):
    add_product(name="On", is_active=True)
    add_product(name="Off", is_active=False)

    assert [p.name for p in list_products(db_session, ProductQuery(is_active=False)).items] == ["Off"]
    assert [p.name for p in list_products(db_session, ProductQuery(is_active=True)).items] == ["On"]
    assert list_products(db_session, ProductQuery()).total_count == 2


def test_deleted_products_hidden_unless_requested(db_session, add_product):
    add_product(name="Visible")
    add_product(name="Gone", is_deleted=True, is_active=False)

    default = list_products(db_session, ProductQuery())
    assert [p.name for p in default.items] == ["Visible"]

    everything = list_products(db_session, ProductQuery(include_deleted=True))
    assert [p.name for p in everything.items] == ["Gone", "Visible"]
    assert everything.total_count == 2


def test_empty_result(db_session):
    result = list_products(db_session, ProductQuery())
    assert result.total_count == 0
    assert result.total_pages == 0
    assert result.items == []


def test_get_product_honours_visibility(db_session, add_product):
    product = add_product(name="Gone", is_deleted=True, is_active=False)

    with pytest.raises(ProductNotFoundError):
        get_product(db_session, product.id)
    assert get_product(db_session, product.id, include_deleted=True).name == "Gone"

    with pytest.raises(ProductNotFoundError):
        get_product(db_session, 9999, include_deleted=True)


@pytest.mark.parametrize(
    "sort_column, attribute",
    [
        ("description", "description"),
        ("Category", "category"),
        ("manufacturer", "manufacturer"),
        ("isActive", "is_active"),
    ],
)
def test_sort_by_each_column_in_both_directions(db_session, add_product, sort_column, attribute):
    add_product(name="one", description="beta", category="Garden", manufacturer="Bosch", is_active=True)
    add_product(name="two", description="alpha", category="Tools", manufacturer="Makita", is_active=False)
    add_product(name="three", description="gamma", category="Audio", manufacturer="Acme", is_active=True)

    asc = list_products(db_session, ProductQuery(sort_column=sort_column))
    asc_values = [getattr(p, attribute) for p in asc.items]
    assert asc_values == sorted(asc_values)

    desc = list_products(db_session, ProductQuery(sort_column=sort_column, sort_order="desc"))
    desc_values = [getattr(p, attribute) for p in desc.items]
    assert desc_values == sorted(desc_values, reverse=True)
    assert asc_values != desc_values


def test_sort_by_active_flag_breaks_ties_by_id(db_session, add_product):
    first = add_product(name="z", is_active=True)
    second = add_product(name="y", is_active=False)
    third = add_product(name="x", is_active=True)

    asc = list_products(db_session, ProductQuery(sort_column="isactive"))
    assert [p.id for p in asc.items] == [second.id, first.id, third.id]

    desc = list_products(db_session, ProductQuery(sort_column="isactive", sort_order="desc"))
    assert [p.id for p in desc.items] == [third.id, first.id, second.id]
