"""Feature packages backed by persistent storage."""
