"""Player identity resolution and daily-fantasy MLB projections."""
