"""HTTP routers for the dashboard API."""
