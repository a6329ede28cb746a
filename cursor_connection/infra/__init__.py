"""Infrastructure helpers shared by the core package."""
