"""
Application package for the Lessons API.

``core`` holds configuration, logging, the storage backends and the
record store; ``schemas`` the pydantic models; ``services`` the
role-scoped operations; ``api`` the FastAPI routers.  The app itself is
built in ``main``.
"""
