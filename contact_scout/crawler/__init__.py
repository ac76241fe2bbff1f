"""contact_scout.crawler: bounded same-origin crawl for contact details."""
from contact_scout.crawler.crawler import ContactCrawler
from contact_scout.crawler.models import CrawlState, CrawlTarget, PageData

__all__ = ["ContactCrawler", "CrawlState", "CrawlTarget", "PageData"]
