"""Client-side feed state."""
