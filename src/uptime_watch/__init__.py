"""uptime-watch - cron-driven HTTP uptime monitor with debounced email alerts."""

__version__ = "1.0.0"
