"""AstroChat backend: birth-data astrology chat with a daily question quota."""
