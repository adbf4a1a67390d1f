"""GrowthTrack: session timers for teen athletes."""

__version__ = "0.1.0"
