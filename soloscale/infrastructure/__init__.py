"""Infrastructure layer: storage. Currently an in-memory matter store."""
