"""Secret Santa registration, draw and notification service."""
