# File: hr_briefing/core/exceptions.py
"""Custom exceptions for the briefing pipeline"""
from typing import Optional


class BriefingError(Exception):
    """Base exception for briefing pipeline errors"""
    pass


class ConfigurationError(BriefingError):
    """Configuration-related errors"""
    pass


class FetchError(BriefingError):
    """HTTP fetch failed (client error, network error or exhausted retries)"""

    def __init__(self, url: str, message: str, status: Optional[int] = None):
        super().__init__(f"{message} ({url})")
        self.url = url
        self.status = status


class ScrapingError(BriefingError):
    """Scraping operation errors"""
    pass


class ValidationError(BriefingError):
    """Data validation errors"""
    pass


class SummarizationError(BriefingError):
    """Language model summarization errors"""
    pass


class DeliveryError(BriefingError):
    """Message delivery errors"""
    pass


class PipelineError(BriefingError):
    """A full pipeline run failed"""
    pass
