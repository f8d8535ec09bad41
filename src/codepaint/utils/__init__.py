"""Utility helpers for codepaint."""
