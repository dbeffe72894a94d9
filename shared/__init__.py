"""Cross-cutting support shared by the service packages."""
