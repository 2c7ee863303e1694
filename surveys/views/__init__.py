# surveys/views/__init__.py
"""
Survey views package.
JSON API, analytics reports and the embeddable widget.
"""
from . import analytics_views, api_views, embed_views

__all__ = ['analytics_views', 'api_views', 'embed_views']
