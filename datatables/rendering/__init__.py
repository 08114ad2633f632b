"""Render-pass state and cell templates."""

from .context import RenderContext
from .views import render_view, substitute_placeholders, url

__all__ = ["RenderContext", "render_view", "substitute_placeholders", "url"]
