"""
Tests for the paginated list service: paging, caching and enrichment.
"""

import pytest

from realestate.repositories.filters import PropertyFilters
from realestate.services.cache import ResultCache
from realestate.services.listing import PaginatedListService, clamp_paging, last_page
from tests.conftest import ImageFactory, PropertyFactory


class SpyRepository:
    """In-memory repository that records how often the store is hit."""

    def __init__(self, rows):
        self.rows = rows
        self.count_calls = 0
        self.find_calls = 0

    async def count(self, predicate=None):
        self.count_calls += 1
        return len(self.rows)

    async def find(self, predicate=None, skip=0, limit=None):
        self.find_calls += 1
        end = None if limit is None else skip + limit
        return self.rows[skip:end]


async def identity_mapper(rows):
    return list(rows)


def make_listing(rows, cache=None):
    repository = SpyRepository(rows)
    service = PaginatedListService(repository, cache or ResultCache(ttl_seconds=300), "property", identity_mapper)
    return repository, service


class TestPaging:

    def test_clamp_defaults(self):
        assert clamp_paging(None, None) == (1, 6)

    def test_clamp_bounds(self):
        assert clamp_paging(0, 500) == (1, 100)
        assert clamp_paging(-3, 0) == (1, 1)
        assert clamp_paging(4, 20) == (4, 20)

    def test_last_page(self):
        assert last_page(0, 6) == 0
        assert last_page(1, 6) == 1
        assert last_page(6, 6) == 1
        assert last_page(7, 6) == 2
        assert last_page(20, 6) == 4


class TestPaginatedListService:

    @pytest.mark.asyncio
    async def test_page_and_meta(self):
        repository, listing = make_listing(list(range(20)))

        result = await listing.list(PropertyFilters(), page=4, limit=6)

        assert result.data == [18, 19]
        assert result.meta.page == 4
        assert result.meta.limit == 6
        assert result.meta.total == 20
        assert result.meta.last_page == 4

    @pytest.mark.asyncio
    async def test_page_beyond_end_is_empty(self):
        repository, listing = make_listing(list(range(5)))

        result = await listing.list(PropertyFilters(), page=3, limit=6)

        assert result.data == []
        assert result.meta.total == 5
        assert result.meta.last_page == 1

    @pytest.mark.asyncio
    async def test_repeated_call_is_served_from_cache(self):
        repository, listing = make_listing(list(range(10)))
        filters = PropertyFilters(name="casa")

        first = await listing.list(filters, page=1, limit=6)
        second = await listing.list(PropertyFilters(name="casa"), page=1, limit=6)

        assert second is first
        assert repository.count_calls == 1
        assert repository.find_calls == 1

    @pytest.mark.asyncio
    async def test_different_parameters_are_cached_separately(self):
        repository, listing = make_listing(list(range(10)))

        await listing.list(PropertyFilters(), page=1, limit=6)
        await listing.list(PropertyFilters(), page=2, limit=6)
        await listing.list(PropertyFilters(name="casa"), page=1, limit=6)

        assert repository.find_calls == 3

    @pytest.mark.asyncio
    async def test_force_refresh_bypasses_and_rewrites_cache(self):
        repository, listing = make_listing(list(range(10)))

        first = await listing.list(PropertyFilters(), page=1, limit=6)
        repository.rows = list(range(3))
        refreshed = await listing.list(PropertyFilters(), page=1, limit=6, force_refresh=True)
        again = await listing.list(PropertyFilters(), page=1, limit=6)

        assert refreshed is not first
        assert refreshed.meta.total == 3
        assert again is refreshed
        assert repository.find_calls == 2

    @pytest.mark.asyncio
    async def test_cache_result_false_does_not_store(self):
        repository, listing = make_listing(list(range(10)))

        await listing.list(PropertyFilters(), cache_result=False)
        await listing.list(PropertyFilters(), cache_result=False)

        assert repository.find_calls == 2

    @pytest.mark.asyncio
    async def test_out_of_range_paging_is_clamped(self):
        repository, listing = make_listing(list(range(150)))

        result = await listing.list(PropertyFilters(), page=0, limit=500)

        assert result.meta.page == 1
        assert result.meta.limit == 100
        assert len(result.data) == 100


class TestPropertyListing:
    """Listing through PropertyService against the database."""

    @pytest.mark.asyncio
    async def test_twenty_properties_six_per_page(self, db_session, property_service, test_owner):
        for index in range(20):
            await PropertyFactory.create(db_session, test_owner.id, name=f"Casa {index}", code_internal=index + 1)

        result = await property_service.list(PropertyFilters(), page=1, limit=6)

        assert len(result.data) == 6
        assert result.meta.total == 20
        assert result.meta.last_page == 4
        assert [dto.name for dto in result.data] == [f"Casa {i}" for i in range(6)]

    @pytest.mark.asyncio
    async def test_default_page_size(self, db_session, property_service, test_owner):
        for index in range(8):
            await PropertyFactory.create(db_session, test_owner.id, code_internal=index + 1)

        result = await property_service.list(PropertyFilters())

        assert result.meta.limit == 6
        assert len(result.data) == 6

    @pytest.mark.asyncio
    async def test_list_items_carry_first_image(self, db_session, property_service, test_owner):
        with_images = await PropertyFactory.create(db_session, test_owner.id, name="Con imagen")
        without_image = await PropertyFactory.create(db_session, test_owner.id, name="Sin imagen")
        first = await ImageFactory.create(db_session, with_images.id, file="https://cdn.example.com/a.jpg")
        await ImageFactory.create(db_session, with_images.id, file="https://cdn.example.com/b.jpg")

        result = await property_service.list(PropertyFilters())
        by_name = {dto.name: dto for dto in result.data}

        assert by_name["Con imagen"].image.id == first.id
        assert by_name["Con imagen"].image.file == "https://cdn.example.com/a.jpg"
        assert by_name["Sin imagen"].image is None
        assert by_name["Sin imagen"].id == without_image.id

    @pytest.mark.asyncio
    async def test_cached_list_survives_new_rows_until_refresh(self, db_session, property_service, test_owner):
        await PropertyFactory.create(db_session, test_owner.id)
        first = await property_service.list(PropertyFilters())

        await PropertyFactory.create(db_session, test_owner.id, name="Nueva")
        cached = await property_service.list(PropertyFilters())
        refreshed = await property_service.list(PropertyFilters(), force_refresh=True)

        assert cached is first
        assert cached.meta.total == 1
        assert refreshed.meta.total == 2
