"""Git-backed content publishing for events and scholarships."""

__version__ = "0.3.0"
