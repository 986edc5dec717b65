"""Process launch and installation helpers for TeamCity environments."""
