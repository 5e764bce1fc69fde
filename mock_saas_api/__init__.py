"""Mock SaaS API: a crawlable, deliberately unreliable REST dataset."""

__version__ = "1.0.0"
