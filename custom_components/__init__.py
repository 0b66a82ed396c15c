"""Custom components namespace for Home Assistant."""
