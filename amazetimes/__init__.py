"""AmazeTimes Now: bilingual Tamil Nadu political news."""

__version__ = "0.1.0"
