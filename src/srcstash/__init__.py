"""srcstash: content-addressed source cache for package builds."""

__version__ = "0.1.0"
