"""Application layer: ports (collaborator contracts) and services."""
