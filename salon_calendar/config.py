"""Configuration for the salon calendar dashboard.

Calendar rules centralized here - modify as needed without touching code.
Deployment settings come from the environment (a local .env is honoured).
"""
import os

from dotenv import load_dotenv

load_dotenv()

# Calendar window: rows are rendered for [CALENDAR_START_HOUR, CALENDAR_END_HOUR)
CALENDAR_START_HOUR = 9
CALENDAR_END_HOUR = 21
TOTAL_HOURS = CALENDAR_END_HOUR - CALENDAR_START_HOUR

# Click granularity inside an hour cell
QUARTER_MINUTES = 15
SLOTS_PER_HOUR = 60 // QUARTER_MINUTES
VALID_MINUTES = (0, 15, 30, 45)

# Booking defaults
DEFAULT_SLOT_MINUTES = 60
DEFAULT_DRAFT_STATUS = "confirmed"

# Shown when a backend record lost its staff member or customer (deleted)
UNASSIGNED_STAFF_NAME = "Unassigned"
UNKNOWN_CLIENT_NAME = "Unknown client"

# Rendering
MIN_CARD_HEIGHT = 30
LONE_CARD_WIDTH = 0.85

LAYOUT = {
    "mobile_max_width": 640,
    "tablet_max_width": 1024,
    "week_chrome_height": 250,
    "week_min_cell_height": 60,
    "staff_cell_height_mobile": 80,
    "staff_cell_height": 100,
}

# Backend
API_BASE_URL = os.getenv("SALON_API_BASE_URL", "http://localhost:5000/api")
API_TOKEN = os.getenv("SALON_API_TOKEN")
HTTP_TIMEOUT = int(os.getenv("SALON_HTTP_TIMEOUT", "15"))
HTTP_MAX_RETRIES = int(os.getenv("SALON_HTTP_MAX_RETRIES", "3"))
LOG_LEVEL = os.getenv("SALON_LOG_LEVEL", "INFO")
