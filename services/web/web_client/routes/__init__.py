"""HTML view blueprints for the web client."""
