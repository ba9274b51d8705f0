"""HTTP API: app factory, opportunity service and response formatting."""
