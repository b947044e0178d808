"""FastAPI application package for the AstroChat backend."""
