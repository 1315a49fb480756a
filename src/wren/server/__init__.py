"""Server layer — dispatches one ASGI request through the route table."""
