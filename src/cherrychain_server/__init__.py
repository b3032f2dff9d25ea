"""CherryChain API server -- FastAPI app wrapping the simulation."""
