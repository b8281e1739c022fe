"""gridly-sync: keeps content-store entries and a Gridly localization grid in sync."""

__version__ = "0.1.0"
