"""API Routers"""
from eventmap.routers import collections, events

__all__ = ["collections", "events"]
