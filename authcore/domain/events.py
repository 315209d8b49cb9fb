from __future__ import annotations


USER_REGISTERED = "auth.user.registered"
USER_LOGGED_IN = "auth.user.logged_in"
PASSWORD_RESET_REQUESTED = "auth.password.reset_requested"
PASSWORD_RESET_COMPLETED = "auth.password.reset_completed"
PASSWORD_CHANGED = "auth.password.changed"
