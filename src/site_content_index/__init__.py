"""Content aggregation, tagging and search ranking for a markdown-driven site."""
