"""
API package containing versioned routes.

Each version subpackage exposes a ``router`` that includes its
endpoint modules.
"""
