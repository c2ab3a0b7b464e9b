"""HTTP request layer (FastAPI) over the analysis engine and the AI coach."""
