"""Developer tooling: opt-in timing instrumentation and synthetic device data."""
