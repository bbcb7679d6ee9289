"""schedtz: local-time columns for UTC schedule tables in HTML documents."""
