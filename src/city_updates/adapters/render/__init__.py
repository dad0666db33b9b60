"""Feed renderers."""

from city_updates.adapters.render.markdown_renderer import MarkdownFeedRenderer

__all__ = ["MarkdownFeedRenderer"]
