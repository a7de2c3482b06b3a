"""PlantSpace backend: REST API and real-time relay."""
