"""GulfNav: maritime route planning and voyage optimization for the Persian Gulf region."""

__version__ = "0.3.0"
