"""Program model for Python programs."""
