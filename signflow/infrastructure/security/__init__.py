"""Token handling for the external identity collaborator."""
