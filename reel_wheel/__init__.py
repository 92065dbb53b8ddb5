"""Client library and admin CLI for the Reel Wheel movie-prop rental catalog."""

__version__ = "0.1.0"
