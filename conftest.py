"""Global pytest configuration."""

import os

# Point the client at a non-routable test host before any imports
os.environ.setdefault("PDF_API_URL", "http://pdf-api.test")
os.environ.setdefault("UPDATE_DEBOUNCE_MS", "20")
