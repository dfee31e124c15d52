"""Shared helpers for dates, money, text and logging."""
