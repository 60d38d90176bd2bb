"""Feature packages: recognition, classification, semantic providers, extraction, lookup and batch processing."""
