"""In-process doubles for the browser page and the E2E test-control API."""
