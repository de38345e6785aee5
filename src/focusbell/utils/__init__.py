"""Utility helpers for focusbell."""
