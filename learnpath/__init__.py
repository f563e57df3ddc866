"""
learnpath - Progress and gamification engine for topic learning pages.

Tracks a learner through the ordered parts of a topic, awards XP and badges,
and aggregates every topic into one trainer profile (level, streak, global
badges).
"""

__version__ = "1.0.0"
