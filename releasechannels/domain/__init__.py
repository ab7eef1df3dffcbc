"""
Domain models and error types shared by the store, loader and API layers.
"""
