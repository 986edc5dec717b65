"""TeamCity environments: registry, settings and override resolution."""
