"""PicStyle: photo stylization pipeline and service."""

__version__ = "0.1.0"
