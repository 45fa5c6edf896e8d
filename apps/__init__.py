"""Applications built on the engine packages."""
