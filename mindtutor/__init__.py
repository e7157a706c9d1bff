"""
mindtutor - Lesson-progression engine for a conversational coaching tutor.

Tracks a learner across the OT → U → L → C curriculum, enforces sequential
unlocking, fetches series content and caches AI-generated lesson material.
"""

__version__ = "0.1.0"
