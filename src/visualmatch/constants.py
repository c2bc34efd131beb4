# -*- coding: utf-8 -*-
"""Application constants."""

APP_NAME = "visualmatch"
APP_VERSION = "0.1.0"

DEFAULT_SETTINGS_FILE = "settings.json"

DEFAULT_VIEWPORT = {"width": 1920, "height": 1080}
DEFAULT_THRESHOLD = 0.1
SCROLL_SETTLE_MS = 500
NAVIGATION_TIMEOUT_MS = 30000
BROWSER_ENGINES = ("chromium", "firefox", "webkit")
CHROMIUM_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]

# Opaque white used to pad reconciled images.
PAD_COLOR = (255, 255, 255, 255)

CHANGE_IMPROVEMENT = "improvement"
CHANGE_REGRESSION = "regression"
CHANGE_NONE = "no-significant-change"
CHANGE_EPSILON = 0.5

STATUS_EXCELLENT = "excellent"
STATUS_GOOD = "good"
STATUS_NEEDS_IMPROVEMENT = "needs-improvement"
STATUS_MAJOR_FIXES = "major-fixes-needed"

STATUS_BANDS = (
    (95, STATUS_EXCELLENT),
    (85, STATUS_GOOD),
    (70, STATUS_NEEDS_IMPROVEMENT),
)

STATUS_LABELS = {
    STATUS_EXCELLENT: "Excellent match",
    STATUS_GOOD: "Good match",
    STATUS_NEEDS_IMPROVEMENT: "Needs improvement",
    STATUS_MAJOR_FIXES: "Major fixes needed",
}

MONITOR_RUNNING = "running"
MONITOR_STOPPED = "stopped"
