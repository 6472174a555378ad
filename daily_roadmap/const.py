"""Shared constants and defaults for the daily roadmap."""

from __future__ import annotations

import logging

LOGGER = logging.getLogger(__package__)

DEFAULT_START_MINUTES = 360
MAX_START_MINUTES = 1380
START_STEP_MINUTES = 15

MIN_DURATION_MINUTES = 15
DURATION_STEP_MINUTES = 15
DEFAULT_DURATION_MINUTES = 60

MAX_TITLE_LENGTH = 100
MAX_NOTES_LENGTH = 500

DEFAULT_WEEK_DAYS = 7
DEFAULT_OWNER = "me"
DEFAULT_DATABASE_PATH = "roadmap.db"

ICON_TAGS = ("Sun", "Dumbbell", "Briefcase", "Code", "Brain", "TrendingUp", "Target", "Award", "Clock", "Zap")

COLOR_TAGS = (
    "amber-orange",
    "rose-pink",
    "sky-cyan",
    "emerald-green",
    "violet-purple",
    "pink-rose",
    "orange-red",
    "cyan-blue",
)

# First-use activity set, in display order.
SEED_ACTIVITIES = (
    {"title": "Morning Messages & Meditation", "duration_minutes": 30, "icon_tag": "Sun", "color_tag": "amber-orange"},
    {"title": "Exercise", "duration_minutes": 60, "icon_tag": "Dumbbell", "color_tag": "rose-pink"},
    {"title": "Job Hunting", "duration_minutes": 60, "icon_tag": "Briefcase", "color_tag": "sky-cyan"},
    {"title": "Selenium Automation Training", "duration_minutes": 120, "icon_tag": "Code", "color_tag": "emerald-green"},
    {"title": "ML Engineer Training", "duration_minutes": 180, "icon_tag": "Brain", "color_tag": "violet-purple"},
    {"title": "Business Development", "duration_minutes": 120, "icon_tag": "TrendingUp", "color_tag": "pink-rose"},
)

STATUS_OK = "ok"
STATUS_UNKNOWN = "unknown"
