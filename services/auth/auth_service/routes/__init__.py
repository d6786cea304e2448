"""HTTP route blueprints for the auth service."""
