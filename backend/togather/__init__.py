"""Togather announcements backend."""
