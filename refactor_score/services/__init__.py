"""External collaborators: model endpoint, git and persistence."""
