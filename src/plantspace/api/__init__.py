"""HTTP and WebSocket surface of the PlantSpace backend."""
