"""Gamification engine test suite."""
