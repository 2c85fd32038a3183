"""Request building, routing and forwarding components."""
