"""Pure, synchronous authorization core."""
