"""Global pytest configuration."""

import os

# Keep tests off the network and independent of a developer's .env
os.environ.setdefault("GOOGLE_MAPS_API_KEY", "test-key")
os.environ.setdefault("ROUTING_PROVIDER", "google")
os.environ.setdefault("DIRECTIONS_LANGUAGE", "ko")
