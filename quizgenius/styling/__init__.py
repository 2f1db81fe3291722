"""Styling module for QuizGenius application."""

from .color_palette import ColorPalette, Theme

__all__ = ["ColorPalette", "Theme"]
