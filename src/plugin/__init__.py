"""TeamCity plugin metadata."""
