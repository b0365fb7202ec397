"""Request controllers for the accounts service."""
