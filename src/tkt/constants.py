"""Constants for the tk ticket tracker."""

from __future__ import annotations

# Storage layout
DEFAULT_TICKETS_DIR = ".tickets"
TICKET_EXTENSION = ".md"
HEADER_DELIMITER = "---"

# Environment variable overriding the tickets directory
TICKETS_DIR_ENV = "TICKETS_DIR"

# Config file for an external tickets directory
TICKETSRC_FILENAME = ".ticketsrc"

# Default values
DEFAULT_TYPE = "task"
DEFAULT_PRIORITY = 2
DEFAULT_TITLE = "Untitled"

# Limits
MIN_PRIORITY = 0
MAX_PRIORITY = 4
ID_SUFFIX_LENGTH = 4
ID_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
ID_GENERATION_RETRIES = 10
CLOSED_DEFAULT_LIMIT = 20
# How many recently modified tickets `closed` scans before filtering
CLOSED_SCAN_WINDOW = 100

# Tree connectors
TREE_BRANCH = "├── "
TREE_LAST = "└── "
TREE_PIPE = "│   "
TREE_SPACE = "    "

# Color mappings for CLI display
PRIORITY_COLORS = {
    0: "bright_red",
    1: "yellow",
    2: "white",
    3: "cyan",
    4: "bright_black",
}

STATUS_COLORS = {
    "open": "bright_green",
    "in_progress": "bright_blue",
    "closed": "white",
}
