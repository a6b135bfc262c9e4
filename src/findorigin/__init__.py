"""FindOrigin: AI-assisted source discovery for Telegram."""

__version__ = "0.1.0"
