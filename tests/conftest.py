"""Shared fixtures: a small topic, an in-memory store and a controllable clock."""

from datetime import date, timedelta

import pytest

from learnpath.classroom import MemoryStorage, TrainerAggregator
from learnpath.schemas import Badge, Insight, Part, TopicConfig


class FakeClock:
    """Stand-in for date.today that tests can move forward."""

    def __init__(self, start: date):
        self.current = start

    def __call__(self) -> date:
        return self.current

    def advance(self, days: int = 1):
        self.current += timedelta(days=days)


def make_topic(topic_id: str = "java-basics", **overrides) -> TopicConfig:
    data = dict(
        id=topic_id,
        title="Java Basics",
        parts=[
            Part(id=1, title="Classes", icon="📦", xp_read=50, xp_quiz=100,
                 insights=[Insight(id=1, text="final classes")]),
            Part(id=2, title="Control Flow", icon="🔀", xp_read=50, xp_quiz=100),
            Part(id=3, title="Collections", icon="🧺", xp_read=0, xp_quiz=50),
        ],
        badges=[
            Badge(id="first-class", name="First Class", icon="🥇", required_part_ids=[1]),
            Badge(id="flow-master", name="Flow Master", icon="🌊", required_part_ids=[1, 2]),
        ],
        total_xp=400,
        hl_keywords=["public", "class", "if", "return"],
        hl_types=["String", "int"],
    )
    data.update(overrides)
    return TopicConfig(**data)


@pytest.fixture
def topic_config() -> TopicConfig:
    return make_topic()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(date(2024, 3, 1))


@pytest.fixture
def trainer(storage, clock) -> TrainerAggregator:
    return TrainerAggregator(storage, today=clock)
