"""Move planning, execution and reporting."""
