"""FastAPI application for statevault."""
