"""Route blueprints for the task service (JSON API only)."""
