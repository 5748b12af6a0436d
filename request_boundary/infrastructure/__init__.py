"""Infrastructure Layer — logging setup shared by the boundary and its host app."""
