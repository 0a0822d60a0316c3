"""Logo history — durable timeline of every confirmed logo change."""
