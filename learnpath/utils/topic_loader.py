"""
Topic loader utility for learnpath.

Loads YAML topic configurations from the topics/ directory.
"""

from pathlib import Path
import yaml

from learnpath.schemas import TopicConfig


# Default topics directory (relative to project root)
TOPICS_DIR = Path(__file__).parent.parent.parent / "topics"


def load_topic(name: str, topics_dir: Path | None = None) -> TopicConfig:
    """
    Load a topic configuration by name.

    Args:
        name: Topic file name without .yaml extension (e.g., "java-basics")
        topics_dir: Optional custom topics directory

    Returns:
        Validated TopicConfig

    Raises:
        FileNotFoundError: If topic file doesn't exist
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If the file is not a valid topic
    """
    dir_path = topics_dir or TOPICS_DIR
    file_path = dir_path / f"{name}.yaml"

    if not file_path.exists():
        raise FileNotFoundError(f"Topic configuration not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        return TopicConfig.model_validate(yaml.safe_load(f))


def get_available_topics(topics_dir: Path | None = None) -> list[str]:
    """
    List all available topic configurations.

    Args:
        topics_dir: Optional custom topics directory

    Returns:
        Sorted list of topic names (without .yaml extension)
    """
    dir_path = topics_dir or TOPICS_DIR
    if not dir_path.exists():
        return []
    return sorted(p.stem for p in dir_path.glob("*.yaml"))
