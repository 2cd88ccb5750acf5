"""Toronto Attractions API — FastAPI service over the attractions catalogue."""
