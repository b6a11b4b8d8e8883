"""AgriSense: farming advisories from weather conditions."""

__version__ = "0.1.0"
