"""RSS news collection and storage."""

from investment_helper.news.collector import NewsCollector
from investment_helper.news.feeds import FEED_SOURCES
from investment_helper.news.store import NewsStore

__all__ = ["FEED_SOURCES", "NewsCollector", "NewsStore"]
