"""Client-side services: auth session, identity, data sync and per-browser state."""
