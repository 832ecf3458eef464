"""Searches restricted by exact-match columns, here a tenant id."""

import pytest

from scout_database.schemas import SearchQuery

from conftest import TENANT_ID_1, TENANT_ID_2


def tenant_query(query: str, tenant_id: str, **kwargs) -> SearchQuery:
    return SearchQuery("user", query, filters={"tenant_id": tenant_id}, **kwargs)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "query,expected",
    [
        ("abc", [2, 1]),
        ("fo", [4, 3]),
        ("euro cent", [8, 6, 7]),
        ("john", []),
    ],
)
async def test_first_tenant(make_seeker, tenant_postings, query, expected):
    result = await make_seeker().search(tenant_query(query, TENANT_ID_1))

    assert result.identifiers == expected


@pytest.mark.asyncio
async def test_second_tenant_only_sees_its_own_documents(make_seeker, tenant_postings):
    seeker = make_seeker()

    assert (await seeker.search(tenant_query("abc", TENANT_ID_2))).identifiers == []
    assert (await seeker.search(tenant_query("john", TENANT_ID_2))).identifiers == [3]
    assert (await seeker.search(tenant_query("john doe", TENANT_ID_2))).identifiers == [3]


@pytest.mark.asyncio
async def test_unfiltered_search_spans_tenants(make_seeker, tenant_postings):
    result = await make_seeker().search(SearchQuery("user", "fooo john"))

    # doc 3 exists for both tenants and matches through either of them
    assert 3 in result.identifiers


@pytest.mark.asyncio
async def test_tenant_limit_and_pagination(make_seeker, tenant_postings):
    seeker = make_seeker()

    limited = await seeker.search(tenant_query("baz", TENANT_ID_1, limit=3))
    assert limited.identifiers == [100, 101, 102]
    assert limited.hits == 5

    second_page = await seeker.search(tenant_query("baz", TENANT_ID_1), page=2, page_size=2)
    assert second_page.identifiers == [102, 103]
    assert second_page.hits == 5

    other_tenant = await seeker.search(tenant_query("baz", TENANT_ID_2, limit=3))
    assert other_tenant.identifiers == []
    assert other_tenant.hits == 0


@pytest.mark.asyncio
async def test_indexed_exact_values_are_filterable(indexer, make_seeker):
    from scout_database.schemas import Document, ExactValue, FreeText

    await indexer.index(
        [
            Document("user", 1, {"name": FreeText("Ada"), "tenant_id": ExactValue("a")}),
            Document("user", 2, {"name": FreeText("Ada"), "tenant_id": ExactValue("b")}),
        ]
    )
    seeker = make_seeker()

    assert (await seeker.search(tenant_query("ada", "a"))).identifiers == [1]
    assert (await seeker.search(tenant_query("ada", "b"))).identifiers == [2]
    assert (await seeker.search(SearchQuery("user", "ada"))).identifiers == [1, 2]
