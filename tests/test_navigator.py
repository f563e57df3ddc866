"""Tests for part navigation and availability."""

import pytest

from learnpath.classroom import Navigator, PartAvailability, TopicProgressEngine


@pytest.fixture
def engine(topic_config, storage):
    return TopicProgressEngine(topic_config, storage)


@pytest.fixture
def navigator(engine):
    return Navigator(engine)


class TestAvailability:

    def test_initial_availability(self, navigator):
        assert navigator.get_part_availability(1) == PartAvailability.AVAILABLE
        assert navigator.get_part_availability(2) == PartAvailability.LOCKED
        assert navigator.is_part_available(1)
        assert not navigator.is_part_available(2)

    def test_completion_unlocks_next(self, engine, navigator):
        engine.complete_part(1)
        assert navigator.get_part_availability(1) == PartAvailability.COMPLETED
        assert navigator.get_part_availability(2) == PartAvailability.AVAILABLE

    def test_completed_out_of_order_is_completed(self, engine, navigator):
        engine.complete_part(3)
        assert navigator.get_part_availability(3) == PartAvailability.COMPLETED
        assert not navigator.is_part_available(3)


class TestNavigation:

    def test_next_and_previous(self, navigator):
        assert navigator.get_next_part_id(1) == 2
        assert navigator.get_next_part_id(3) is None
        assert navigator.get_previous_part_id(2) == 1
        assert navigator.get_previous_part_id(1) is None

    def test_unknown_part(self, navigator):
        assert navigator.get_next_part_id(9) is None
        assert navigator.get_previous_part_id(9) is None
        assert navigator.get_part_position(9) == (0, 3)

    def test_position(self, navigator):
        assert navigator.get_part_position(2) == (2, 3)
        assert navigator.total_parts == 3


class TestNavigationTree:

    def test_tree_flags(self, engine, navigator):
        engine.mark_read(1)
        engine.complete_part(1)
        engine.navigate_to(2)

        tree = navigator.get_navigation_tree()

        assert [item.part.id for item in tree] == [1, 2, 3]
        assert [item.availability for item in tree] == [
            PartAvailability.COMPLETED,
            PartAvailability.AVAILABLE,
            PartAvailability.LOCKED,
        ]
        assert [item.is_current for item in tree] == [False, True, False]
        assert [item.is_read for item in tree] == [True, False, False]

    def test_status_indicators(self, engine, navigator):
        engine.complete_part(1)
        engine.navigate_to(2)
        assert navigator.get_status_indicator(1) == "✓"
        assert navigator.get_status_indicator(2) == "→"
        assert navigator.get_status_indicator(3) == "◌"

    def test_available_not_current(self, engine, navigator):
        engine.complete_part(1)
        assert navigator.get_status_indicator(2) == "○"

    def test_completed_current_part_shows_check(self, engine, navigator):
        engine.complete_part(1)
        assert engine.state.current_part == 1
        assert navigator.get_status_indicator(1) == "✓"


class TestProgressSummary:

    def test_summary(self, engine, navigator):
        engine.complete_part(1)
        summary = navigator.get_progress_summary()
        assert summary == {
            "total_parts": 3,
            "completed": 1,
            "completion_percent": 33,
            "xp": 100,
            "total_xp": 400,
            "badges": 1,
            "total_badges": 2,
            "current_part": 1,
        }
