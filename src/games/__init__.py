"""Game configuration factories."""
