"""Cross-context plumbing: backend client, errors, settings, logging."""
