"""Database package — declarative Base only; engines and sessions live in infrastructure/."""
