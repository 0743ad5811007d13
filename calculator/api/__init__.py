"""REST API for product resolution, price confirmation and insights."""
