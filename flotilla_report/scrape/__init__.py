from .vessels import scrape_vessels, scrape_with_retry

__all__ = ["scrape_vessels", "scrape_with_retry"]
