"""TaskVault — per-user task lists behind credential-based auth.

Users sign up and sign in for a JWT; every task operation is scoped
to the user who created the task.
"""

__version__ = "0.1.0"
