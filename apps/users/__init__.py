"""Users app package.

Holds the dashboard user model (email login, access level) together with
the login and logout views. Use ``apps.users.models.User`` as the
AUTH_USER_MODEL throughout the project.
"""
