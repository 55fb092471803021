"""Physio triage engine: differential diagnosis, red-flag screening and prognosis."""

__version__ = "0.1.0"
