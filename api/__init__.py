"""InspectPilot HTTP API."""
