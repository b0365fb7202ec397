"""Service integrations: users datastore, passwords, and auth tokens."""
