"""Clinical site capacity tracking service for the paramedic program."""

__version__ = "0.1.0"
