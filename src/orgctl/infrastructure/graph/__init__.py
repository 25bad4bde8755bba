"""Team nesting graph analysis via NetworkX."""
