"""Version 1 of the Lessons API."""
