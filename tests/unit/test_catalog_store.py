"""Unit tests for CatalogStore: ensure-track merge rules and lesson seeding."""

import uuid

import pytest
from sqlalchemy import func, select

from learnpath.engines.catalog import CatalogStore
from learnpath.kernel.exceptions import ConflictError, InvalidPayload, NotFound
from learnpath.kernel.models import Lesson, Track
from learnpath.schemas.catalog import LessonIn, LessonSeed


async def _count(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


async def _track_row(session) -> dict:
    """Every stored column of the single track, read straight from the table."""
    row = (await session.execute(select(Track.__table__))).one()
    return row._asdict()


class TestEnsureTrack:
    """Tests for create-if-absent and partial merge."""

    async def test_creates_with_defaults(self, db_session, track_payload):
        result = await CatalogStore(db_session).ensure_track(track_payload)

        assert result.was_created is True
        assert result.track.slug == "python-basics"
        assert result.track.track_type == "custom"
        assert result.track.status == "draft"
        assert result.track.owner_learner_id is None
        assert result.track.official_sources == ["https://docs.python.org/3/tutorial/"]

    async def test_repeat_is_idempotent(self, db_session, track_payload):
        store = CatalogStore(db_session)
        first = await store.ensure_track(track_payload)
        before = await _track_row(db_session)

        second = await store.ensure_track(track_payload)

        assert second.was_created is False
        assert second.track.id == first.track.id
        assert await _count(db_session, Track) == 1
        assert await _track_row(db_session) == before

    async def test_lost_insert_race_merges_into_winner(self, session_maker, track_payload, monkeypatch):
        async with session_maker() as winner:
            await CatalogStore(winner).ensure_track({**track_payload, "status": "active"})
            await winner.commit()

        async with session_maker() as session:
            store = CatalogStore(session)
            real_lookup = store.get_track_by_slug
            lookups = []

            async def stale_first_lookup(slug):
                # The first read misses the winner's row, as if it had not committed yet
                lookups.append(slug)
                if len(lookups) == 1:
                    return None
                return await real_lookup(slug)

            monkeypatch.setattr(store, "get_track_by_slug", stale_first_lookup)
            result = await store.ensure_track({"slug": "python-basics", "title": "Renamed"})

            assert len(lookups) == 2
            assert result.was_created is False
            assert result.track.title == "Renamed"
            assert result.track.status == "active"
            assert result.track.official_sources == track_payload["official_sources"]
            assert await _count(session, Track) == 1
            await session.rollback()

    async def test_slug_is_normalized(self, db_session, track_payload):
        store = CatalogStore(db_session)
        await store.ensure_track(track_payload)
        again = await store.ensure_track({**track_payload, "slug": "  Python-BASICS "})

        assert again.was_created is False
        assert await _count(db_session, Track) == 1

    async def test_omitted_fields_are_kept(self, db_session, track_payload):
        store = CatalogStore(db_session)
        await store.ensure_track({**track_payload, "status": "active", "track_type": "official"})

        merged = await store.ensure_track({"slug": "python-basics", "title": "Python Basics 2"})

        assert merged.track.title == "Python Basics 2"
        assert merged.track.status == "active"
        assert merged.track.track_type == "official"
        assert merged.track.official_sources == ["https://docs.python.org/3/tutorial/"]

    async def test_supplied_fields_overwrite(self, db_session, track_payload):
        store = CatalogStore(db_session)
        await store.ensure_track(track_payload)

        merged = await store.ensure_track(
            {**track_payload, "official_sources": [], "status": "archived"}
        )

        assert merged.track.official_sources == []
        assert merged.track.status == "archived"
        assert merged.track.track_type == "custom"

    async def test_explicit_null_owner_clears(self, db_session, track_payload):
        store = CatalogStore(db_session)
        owner = uuid.uuid4()
        created = await store.ensure_track({**track_payload, "owner_user_id": str(owner)})
        assert created.track.owner_learner_id == owner

        kept = await store.ensure_track(track_payload)
        assert kept.track.owner_learner_id == owner

        cleared = await store.ensure_track({**track_payload, "owner_user_id": None})
        assert cleared.track.owner_learner_id is None

    async def test_invalid_payload(self, db_session):
        with pytest.raises(InvalidPayload) as exc_info:
            await CatalogStore(db_session).ensure_track(
                {"slug": "x", "title": "T", "official_sources": ["not a url"]}
            )
        fields = {error["field"] for error in exc_info.value.errors}
        assert {"slug", "title", "official_sources"} <= fields
        assert await _count(db_session, Track) == 0


class TestCreateTrack:
    """Tests for strict creation."""

    async def test_create_then_conflict(self, db_session, track_payload):
        store = CatalogStore(db_session)
        track = await store.create_track(track_payload)
        assert track.status == "draft"

        with pytest.raises(ConflictError):
            await store.create_track({**track_payload, "title": "Another title"})

        assert await _count(db_session, Track) == 1
        assert (await store.get_track_by_slug("python-basics")).title == "Python Basics"

    async def test_list_tracks_by_title(self, db_session):
        store = CatalogStore(db_session)
        await store.create_track({"slug": "zz-last", "title": "Algorithms"})
        await store.create_track({"slug": "aa-first", "title": "Web Basics"})

        tracks = await store.list_tracks()
        assert [t.slug for t in tracks] == ["zz-last", "aa-first"]


class TestSeedLessons:
    """Tests for positional upsert and all-or-nothing seeding."""

    async def test_seed_inserts_all(self, db_session, track_payload, lessons_payload):
        store = CatalogStore(db_session)
        await store.ensure_track(track_payload)

        result = await store.seed_lessons({"track_slug": "python-basics", "lessons": lessons_payload})

        assert result.count == 3
        assert [row.position for row in result.lessons] == [1, 2, 3]
        assert await _count(db_session, Lesson) == 3

    async def test_unknown_track(self, db_session, lessons_payload):
        with pytest.raises(NotFound) as exc_info:
            await CatalogStore(db_session).seed_lessons(
                {"track_slug": "missing-track", "lessons": lessons_payload}
            )
        assert exc_info.value.message == "Track not found"

    async def test_reseed_replaces_in_place(self, db_session, track_payload, lessons_payload):
        store = CatalogStore(db_session)
        ensured = await store.ensure_track(track_payload)
        first = await store.seed_lessons({"track_slug": "python-basics", "lessons": lessons_payload})

        second = await store.seed_lessons(
            {
                "track_slug": "python-basics",
                "lessons": [{"lesson_order": 2, "title": "Control flow, revised"}],
            }
        )

        assert second.lessons[0].id == first.lessons[1].id
        assert await _count(db_session, Lesson) == 3

        lesson = await store.get_lesson_at(ensured.track.id, 2)
        assert lesson.title == "Control flow, revised"
        # Full replace: omitted lists are cleared, not merged
        assert lesson.objectives == []
        assert lesson.tags == []
        assert lesson.source_urls == []

    async def test_invalid_lesson_rejects_whole_batch(self, db_session, track_payload, lessons_payload):
        store = CatalogStore(db_session)
        await store.ensure_track(track_payload)
        bad = lessons_payload + [{"lesson_order": 4, "title": "x"}]

        with pytest.raises(InvalidPayload):
            await store.seed_lessons({"track_slug": "python-basics", "lessons": bad})

        assert await _count(db_session, Lesson) == 0

    async def test_duplicate_positions_rejected(self, db_session, track_payload, lessons_payload):
        store = CatalogStore(db_session)
        await store.ensure_track(track_payload)
        dup = lessons_payload + [{**lessons_payload[0], "title": "Another first lesson"}]

        with pytest.raises(InvalidPayload):
            await store.seed_lessons({"track_slug": "python-basics", "lessons": dup})

    async def test_database_rejection_rolls_back_batch(self, db_session, track_payload, lessons_payload):
        store = CatalogStore(db_session)
        await store.ensure_track(track_payload)
        good = [LessonIn(**lesson) for lesson in lessons_payload[:2]]
        # Bypasses validation so the position check constraint fires mid-batch
        broken = LessonIn.model_construct(
            lesson_order=0, title="Broken", objectives=[], tags=[], source_urls=[]
        )
        payload = LessonSeed.model_construct(track_slug="python-basics", lessons=good + [broken])

        with pytest.raises(ConflictError):
            await store.seed_lessons(payload)

        assert await _count(db_session, Lesson) == 0
        # The session stays usable after the rolled-back savepoint
        retry = await store.seed_lessons({"track_slug": "python-basics", "lessons": lessons_payload})
        assert retry.count == 3
