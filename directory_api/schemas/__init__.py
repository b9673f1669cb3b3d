"""Wire schemas for Directory API."""
