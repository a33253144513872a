"""Utility helpers for ScriptSync."""

from scriptsync.utils.screenplay import HeadingParts, ScreenplayUtils

__all__ = ["HeadingParts", "ScreenplayUtils"]
