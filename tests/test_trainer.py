"""Tests for the cross-topic trainer profile."""

import json
from datetime import date

import pytest

from learnpath.classroom import (
    LEVELS,
    MemoryStorage,
    TRAINER_KEY,
    TopicProgressEngine,
    TrainerAggregator,
    topic_key,
)
from learnpath.schemas import TopicState

from conftest import FakeClock, make_topic


def sync_xp(trainer, topic_id: str, xp: int, completed=(), total_parts: int = 3):
    config = make_topic(topic_id, total_xp=100000)
    config = config.model_copy(update={"parts": config.parts[:total_parts]})
    trainer.sync(topic_id, TopicState(xp=xp, completed_parts=list(completed)), config)


class TestLevels:

    @pytest.mark.parametrize("xp,expected", [
        (0, 1), (199, 1), (200, 2), (999, 3), (1000, 4), (9999, 9), (10000, 10), (25000, 10),
    ])
    def test_level_for_xp(self, trainer, xp, expected):
        sync_xp(trainer, "a", xp)
        assert trainer.get_level().level == expected

    def test_next_level(self, trainer):
        sync_xp(trainer, "a", 250)
        assert trainer.get_next_level() == LEVELS[2]

    def test_no_next_level_at_top(self, trainer):
        sync_xp(trainer, "a", 10000)
        assert trainer.get_next_level() is None
        assert trainer.level_progress() == 1.0

    def test_level_progress(self, trainer):
        sync_xp(trainer, "a", 350)
        assert trainer.level_progress() == pytest.approx(0.5)


class TestStreak:

    def test_consecutive_days_then_gap(self, storage, clock):
        trainer = TrainerAggregator(storage, today=clock)
        streaks = []
        for _ in range(3):
            trainer.update_streak()
            streaks.append(trainer.state.streak)
            clock.advance()
        assert streaks == [1, 2, 3]

        clock.advance(2)
        trainer.update_streak()
        assert trainer.state.streak == 1

    def test_same_day_is_noop(self, trainer, clock):
        trainer.update_streak()
        trainer.update_streak()
        assert trainer.state.streak == 1
        assert trainer.state.last_date == clock.current

    def test_streak_persisted(self, storage, trainer, clock):
        trainer.update_streak()
        saved = json.loads(storage.get(TRAINER_KEY))
        assert saved["streak"] == 1
        assert saved["last_date"] == clock.current.isoformat()

    def test_streak_survives_new_instance(self, storage, clock):
        TrainerAggregator(storage, today=clock).update_streak()
        clock.advance()
        trainer = TrainerAggregator(storage, today=clock)
        trainer.update_streak()
        assert trainer.state.streak == 2


class TestSync:

    def test_global_xp_recomputed_not_accumulated(self, trainer):
        sync_xp(trainer, "a", 100)
        sync_xp(trainer, "b", 250)
        assert trainer.state.global_xp == 350
        sync_xp(trainer, "a", 150)
        assert trainer.state.global_xp == 400

    def test_sync_reloads_shared_profile(self, storage, clock):
        page_a = TrainerAggregator(storage, today=clock)
        page_b = TrainerAggregator(storage, today=clock)
        sync_xp(page_a, "a", 100)
        sync_xp(page_b, "b", 250)
        assert set(page_b.state.topic_snapshots) == {"a", "b"}
        sync_xp(page_a, "a", 120)
        assert page_a.state.global_xp == 370

    def test_snapshot_contents(self, trainer):
        sync_xp(trainer, "a", 80, completed=[1, 2], total_parts=2)
        snapshot = trainer.state.topic_snapshots["a"]
        assert snapshot.completed_parts == [1, 2]
        assert snapshot.total_parts == 2
        assert snapshot.is_complete

    def test_state_is_a_copy(self, trainer):
        sync_xp(trainer, "a", 10)
        trainer.state.topic_snapshots.clear()
        assert "a" in trainer.state.topic_snapshots


class TestGlobalBadges:

    def test_first_topic_started(self, trainer):
        sync_xp(trainer, "a", 0)
        assert trainer.state.global_badges == ["explorer-1"]

    def test_xp_badges(self, trainer):
        sync_xp(trainer, "a", 600)
        sync_xp(trainer, "b", 500)
        assert "xp-1000" in trainer.state.global_badges
        assert "xp-5000" not in trainer.state.global_badges

    def test_topics_completed(self, trainer):
        sync_xp(trainer, "a", 0, completed=[1, 2, 3])
        sync_xp(trainer, "b", 0, completed=[1, 2, 3])
        assert "explorer-3" not in trainer.state.global_badges
        sync_xp(trainer, "c", 0, completed=[1, 2, 3])
        assert "explorer-3" in trainer.state.global_badges

    def test_streak_badge(self, trainer, clock):
        for _ in range(7):
            trainer.update_streak()
            clock.advance()
        sync_xp(trainer, "a", 0)
        assert "streak-7" in trainer.state.global_badges
        assert "streak-30" not in trainer.state.global_badges

    def test_badges_never_revoked(self, trainer):
        sync_xp(trainer, "a", 1200)
        sync_xp(trainer, "a", 0)
        assert "xp-1000" in trainer.state.global_badges
        assert trainer.check_global_badges() == []


class TestFirstLoad:

    def test_legacy_streak_migration(self):
        storage = MemoryStorage({
            "ca-learn": json.dumps({"streak": 5, "lastDate": "2024-02-28"}),
            "nia-arch-learn": json.dumps({"streak": 3, "lastDate": "2024-02-29"}),
        })
        trainer = TrainerAggregator(storage, today=FakeClock(date(2024, 3, 1)))
        assert trainer.state.streak == 5
        assert trainer.state.last_date == date(2024, 2, 28)

    def test_migrated_streak_continues(self):
        storage = MemoryStorage({"ca-learn": json.dumps({"streak": 5, "last_date": "2024-02-29"})})
        trainer = TrainerAggregator(storage, today=FakeClock(date(2024, 3, 1)))
        trainer.update_streak()
        assert trainer.state.streak == 6

    def test_no_migration_once_profile_exists(self):
        storage = MemoryStorage({
            TRAINER_KEY: json.dumps({"streak": 2}),
            "ca-learn": json.dumps({"streak": 9}),
        })
        assert TrainerAggregator(storage).state.streak == 2

    def test_unreadable_legacy_entries_ignored(self):
        storage = MemoryStorage({"ca-learn": "{{", "nia-arch-learn": json.dumps([1, 2])})
        assert TrainerAggregator(storage).state.streak == 0

    def test_malformed_profile_replaced_by_defaults(self):
        storage = MemoryStorage({TRAINER_KEY: json.dumps({"global_xp": "lots"})})
        state = TrainerAggregator(storage).state
        assert state.global_xp == 0
        assert state.topic_snapshots == {}


class TestStorageUnavailable:

    def test_probe_failure_keeps_memory_only(self, clock):
        storage = MemoryStorage(disabled=True)
        trainer = TrainerAggregator(storage, today=clock)
        assert trainer.storage_available is False

        trainer.update_streak()
        sync_xp(trainer, "a", 300)

        assert trainer.state.streak == 1
        assert trainer.state.global_xp == 300
        assert storage.data == {}

    def test_later_writes_are_skipped(self, clock):
        storage = MemoryStorage(disabled=True)
        trainer = TrainerAggregator(storage, today=clock)
        storage.disabled = False
        sync_xp(trainer, "a", 300)
        assert TRAINER_KEY not in storage.data

    def test_engine_still_works(self, topic_config, clock):
        storage = MemoryStorage(disabled=True)
        trainer = TrainerAggregator(storage, today=clock)
        engine = TopicProgressEngine(topic_config, storage, trainer=trainer)
        engine.complete_part(1)
        assert trainer.state.global_xp == 100


class TestExportImport:

    def test_export_shape(self, topic_config, storage, trainer):
        engine = TopicProgressEngine(topic_config, storage, trainer=trainer)
        engine.complete_part(1)

        document = json.loads(trainer.export_data())

        assert set(document) == {"trainer", "topics"}
        assert document["trainer"]["global_xp"] == 100
        assert document["topics"]["java-basics"]["completed_parts"] == [1]

    def test_round_trip_to_fresh_store(self, topic_config, storage, trainer, clock):
        engine = TopicProgressEngine(topic_config, storage, trainer=trainer)
        engine.complete_part(1)
        engine.mark_read(2)
        exported = trainer.export_data()

        fresh_storage = MemoryStorage()
        fresh = TrainerAggregator(fresh_storage, today=clock)
        assert fresh.import_data(exported) is True

        assert fresh.state == trainer.state
        assert json.loads(fresh_storage.get(topic_key("java-basics"))) == json.loads(
            storage.get(topic_key("java-basics"))
        )
        restored = TopicProgressEngine(topic_config, fresh_storage)
        assert restored.state.xp == engine.state.xp

    def test_round_trip_same_instance(self, trainer):
        sync_xp(trainer, "a", 100)
        before = trainer.state
        assert trainer.import_data(trainer.export_data()) is True
        assert trainer.state == before

    def test_export_skips_unreadable_topic(self, storage, trainer):
        sync_xp(trainer, "a", 10)
        storage.set(topic_key("a"), "garbage")
        assert json.loads(trainer.export_data())["topics"] == {}

    def test_invalid_json_rejected_without_mutation(self, storage, trainer):
        sync_xp(trainer, "a", 100)
        before = storage.get(TRAINER_KEY)
        assert trainer.import_data("{not json") is False
        assert storage.get(TRAINER_KEY) == before
        assert trainer.state.global_xp == 100

    def test_non_object_rejected(self, trainer):
        assert trainer.import_data("[1, 2]") is False

    def test_invalid_trainer_section_rejected(self, storage, trainer):
        doc = json.dumps({"trainer": {"streak": "many"}, "topics": {"a": {"xp": 1}}})
        assert trainer.import_data(doc) is False
        assert storage.get(topic_key("a")) is None

    def test_trainer_merged_onto_defaults(self, trainer):
        assert trainer.import_data(json.dumps({"trainer": {"global_xp": 700, "extra": 1}})) is True
        state = trainer.state
        assert state.global_xp == 700
        assert state.streak == 0
        assert state.topic_snapshots == {}

    def test_empty_trainer_section_resets_to_defaults(self, storage, trainer):
        trainer.update_streak()
        sync_xp(trainer, "a", 300)

        assert trainer.import_data(json.dumps({"trainer": {}})) is True

        state = trainer.state
        assert state.streak == 0
        assert state.global_xp == 0
        assert state.topic_snapshots == {}
        assert json.loads(storage.get(TRAINER_KEY))["streak"] == 0

    def test_non_object_trainer_section_rejected(self, storage, trainer):
        trainer.update_streak()
        before = storage.get(TRAINER_KEY)
        assert trainer.import_data(json.dumps({"trainer": []})) is False
        assert trainer.state.streak == 1
        assert storage.get(TRAINER_KEY) == before

    def test_null_trainer_section_skipped(self, trainer):
        trainer.update_streak()
        assert trainer.import_data(json.dumps({"trainer": None})) is True
        assert trainer.state.streak == 1

    def test_topics_written_verbatim(self, storage, trainer):
        topic = {"xp": 40, "completed_parts": [1], "custom": "kept"}
        assert trainer.import_data(json.dumps({"topics": {"a": topic}})) is True
        assert json.loads(storage.get(topic_key("a"))) == topic

    def test_import_not_transactional(self, storage, trainer):
        doc = json.dumps({"trainer": {"global_xp": 900}, "topics": ["not", "a", "mapping"]})
        assert trainer.import_data(doc) is False
        assert json.loads(storage.get(TRAINER_KEY))["global_xp"] == 900
