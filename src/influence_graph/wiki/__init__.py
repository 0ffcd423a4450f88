from .client import ContentSource, WikipediaClient

__all__ = ["ContentSource", "WikipediaClient"]
