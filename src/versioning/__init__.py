"""TeamCity version model."""
