"""learnpath utilities."""

from .topic_loader import load_topic, get_available_topics, TOPICS_DIR

__all__ = ["load_topic", "get_available_topics", "TOPICS_DIR"]
