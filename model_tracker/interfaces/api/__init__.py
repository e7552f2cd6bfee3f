"""FastAPI integration for binding request users to tracking guards."""
