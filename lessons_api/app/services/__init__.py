"""
Service layer.

``queries`` holds the derived views computed from the raw tables.  The
role-scoped services (``AdminService``, ``ParentService``,
``TutorService``) expose the operations each kind of caller may
perform and check required input before writing.  ``AccountService``
covers sign-up and login, which happen before a caller has a role.
"""
