"""IdeaForge: creative-generation service with multi-backend routing."""

__version__ = "0.1.0"
