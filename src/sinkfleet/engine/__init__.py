"""Grid, ship and match state for sinkfleet."""
