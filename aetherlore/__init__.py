"""AetherLore — lorebook editor backend for fiction writers."""
