"""SoloScale Legal client-intake wizard."""

__version__ = "0.1.0"
