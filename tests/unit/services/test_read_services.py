"""Tests for the content, search and analytics read paths."""

from datetime import UTC, datetime

import orjson
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from learnsphere.api.errors import BadRequestError, NotFoundError
from learnsphere.cache import CacheClient, ContentCache
from learnsphere.persistence import ContentTable, UserRepository
from learnsphere.services import (
    AdminService,
    AnalyticsService,
    ContentService,
    SearchService,
    SearchType,
)


@pytest.fixture
async def catalog(session: AsyncSession, content_cache: ContentCache) -> dict[str, str]:
    admin = AdminService(session, content_cache, None)
    branch = await admin.create_branch("Physics", ["First Year", "Second Year"])
    optics = await admin.create_subject("Optics", "First Year", branch["_id"])
    mechanics = await admin.create_subject("Mechanics", "Second Year", branch["_id"])
    await admin.add_content(optics["_id"], "Lens basics", "notes", "http://x/1")
    await admin.add_content(mechanics["_id"], "Physics syllabus", "syllabus", "http://x/2")
    await admin.update_progress(optics["_id"], 50)
    return {"branch": branch["_id"], "optics": optics["_id"], "mechanics": mechanics["_id"]}


class TestContentService:
    """Test subject list and detail."""

    @pytest.fixture
    def service(self, session: AsyncSession, content_cache: ContentCache) -> ContentService:
        return ContentService(session, content_cache)

    @pytest.mark.asyncio
    async def test_list_subjects_is_cached(
        self, service: ContentService, catalog: dict, cache_client: CacheClient
    ) -> None:
        subjects = await service.list_subjects()

        assert {s["name"] for s in subjects} == {"Optics", "Mechanics"}
        assert orjson.loads(await cache_client.get("all_subjects_cache")) == subjects

    @pytest.mark.asyncio
    async def test_subject_detail(
        self, service: ContentService, catalog: dict, cache_client: CacheClient
    ) -> None:
        detail = await service.get_subject_content(catalog["optics"])

        assert detail["name"] == "Optics"
        assert detail["branch"] == catalog["branch"]
        assert detail["completionPercentage"] == 50
        assert [c["title"] for c in detail["content"]] == ["Lens basics"]
        assert await cache_client.get(f"subject_content_{catalog['optics']}") is not None

    @pytest.mark.asyncio
    async def test_new_content_visible_after_invalidation(
        self, service: ContentService, session: AsyncSession, content_cache: ContentCache,
        catalog: dict,
    ) -> None:
        """A read after add_content never returns the pre-write detail."""
        await service.get_subject_content(catalog["optics"])
        await AdminService(session, content_cache, None).add_content(
            catalog["optics"], "Prisms", "notes", "http://x/3"
        )

        detail = await service.get_subject_content(catalog["optics"])

        assert [c["title"] for c in detail["content"]] == ["Lens basics", "Prisms"]

    @pytest.mark.asyncio
    async def test_missing_subject_not_cached(
        self, service: ContentService, cache_client: CacheClient
    ) -> None:
        with pytest.raises(NotFoundError):
            await service.get_subject_content("missing")
        assert await cache_client.get("subject_content_missing") is None

    @pytest.mark.asyncio
    async def test_access_count(self, service: ContentService, cache_client: CacheClient) -> None:
        assert await service.access_count() == 0
        await cache_client.incr("website_access_count")
        assert await service.access_count() == 1


class TestSearchService:
    """Test global search, suggestions and filter."""

    @pytest.fixture
    def service(self, session: AsyncSession, content_cache: ContentCache) -> SearchService:
        return SearchService(session, content_cache)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", [None, "", " p ", "x"])
    async def test_short_query_rejected(self, service: SearchService, query: str | None) -> None:
        with pytest.raises(BadRequestError):
            await service.global_search(query)

    @pytest.mark.asyncio
    async def test_all_types(self, service: SearchService, catalog: dict) -> None:
        result = await service.global_search("phys")

        assert result["type"] == "all"
        assert [b["name"] for b in result["results"]["branches"]] == ["Physics"]
        assert [c["title"] for c in result["results"]["content"]] == ["Physics syllabus"]
        assert result["results"]["content"][0]["subjectName"] == "Mechanics"
        assert result["totalResults"] == 2

    @pytest.mark.asyncio
    async def test_type_restricts_collections(
        self, service: SearchService, catalog: dict
    ) -> None:
        result = await service.global_search("optics", SearchType.SUBJECTS)
        assert [s["name"] for s in result["results"]["subjects"]] == ["Optics"]
        assert result["results"]["branches"] == []

    @pytest.mark.asyncio
    async def test_cached_under_full_key(
        self, service: SearchService, catalog: dict, cache_client: CacheClient
    ) -> None:
        await service.global_search("phys", SearchType.ALL, catalog["branch"], 10)
        key = f"search:phys:all:{catalog['branch']}:10"
        assert await cache_client.get(key) is not None

    @pytest.mark.asyncio
    async def test_search_is_ttl_only(
        self, service: SearchService, session: AsyncSession, content_cache: ContentCache,
        catalog: dict,
    ) -> None:
        """Writes do not invalidate cached search results."""
        await service.global_search("prism")
        await AdminService(session, content_cache, None).add_content(
            catalog["optics"], "Prism lab", "notes", "http://x/4"
        )
        result = await service.global_search("prism")
        assert result["totalResults"] == 0

    @pytest.mark.asyncio
    async def test_suggestions(
        self, service: SearchService, catalog: dict, cache_client: CacheClient
    ) -> None:
        suggestions = await service.suggestions("o")
        assert {"text": "Optics", "type": "subject"} in suggestions
        assert await cache_client.get("suggestions:o") is not None

    @pytest.mark.asyncio
    async def test_blank_suggestions(self, service: SearchService) -> None:
        assert await service.suggestions("  ") == []

    @pytest.mark.asyncio
    async def test_filter(self, service: SearchService, catalog: dict) -> None:
        rows = await service.filter_subjects(branch_id=catalog["branch"], category="notes")
        assert [s["name"] for s in rows] == ["Optics"]


class TestAnalyticsService:
    """Test the dashboard summary, growth and engagement."""

    @pytest.mark.asyncio
    async def test_summary(
        self,
        session: AsyncSession,
        content_cache: ContentCache,
        cache_client: CacheClient,
        catalog: dict,
    ) -> None:
        await UserRepository(session).create("root", "root@example.com", "h", "admin")
        await session.commit()
        await cache_client.incr("website_access_count")

        summary = await AnalyticsService(session, content_cache).summary()

        assert summary["totals"] == {
            "branches": 1,
            "subjects": 2,
            "content": 2,
            "users": 0,
            "admins": 1,
            "websiteVisits": 1,
        }
        assert summary["contentDistribution"] == [
            {"category": "notes", "count": 1},
            {"category": "syllabus", "count": 1},
        ]
        assert summary["completionStats"]["maxCompletion"] == 50.0
        assert summary["subjectsByBranch"] == [{"branch": "Physics", "count": 2}]

    @pytest.mark.asyncio
    async def test_growth_groups_by_month(
        self, session: AsyncSession, content_cache: ContentCache, catalog: dict
    ) -> None:
        session.add(
            ContentTable(
                subject_id=catalog["optics"],
                title="Old notes",
                category="notes",
                link="http://x/old",
                created_at=datetime(2024, 3, 9, tzinfo=UTC),
            )
        )
        await session.commit()
        now = datetime.now(UTC)

        growth = await AnalyticsService(session, content_cache).growth()

        assert growth["contentGrowth"] == [
            {"year": 2024, "month": 3, "count": 1},
            {"year": now.year, "month": now.month, "count": 2},
        ]
        assert growth["subjectGrowth"] == [{"year": now.year, "month": now.month, "count": 2}]

    @pytest.mark.asyncio
    async def test_growth_keeps_latest_months(
        self, session: AsyncSession, content_cache: ContentCache, catalog: dict
    ) -> None:
        session.add(
            ContentTable(
                subject_id=catalog["optics"],
                title="Old notes",
                category="notes",
                link="http://x/old",
                created_at=datetime(2024, 3, 9, tzinfo=UTC),
            )
        )
        await session.commit()

        growth = await AnalyticsService(session, content_cache).growth(months=1)

        assert [(g["year"], g["count"]) for g in growth["contentGrowth"]] == [
            (datetime.now(UTC).year, 2)
        ]

    @pytest.mark.asyncio
    async def test_engagement(
        self, session: AsyncSession, content_cache: ContentCache, catalog: dict
    ) -> None:
        admin = AdminService(session, content_cache, None)
        await admin.create_branch("Empty", ["First Year"])
        chemistry = await admin.create_branch("Chemistry", ["First Year"])
        await admin.create_subject("Organic", "First Year", chemistry["_id"])
        await UserRepository(session).create("ada", "ada@example.com", "h", "user")
        await session.commit()

        engagement = await AnalyticsService(session, content_cache).engagement()

        assert engagement["totalUsers"] == 1
        assert engagement["adminCount"] == 0
        assert engagement["contentPerBranch"] == [
            {"branchName": "Chemistry", "subjectCount": 1, "totalContent": 0,
             "contentPerSubject": 0.0},
            {"branchName": "Physics", "subjectCount": 2, "totalContent": 2,
             "contentPerSubject": 1.0},
        ]
