import getpass
import os

REPO_DIR_NAME = os.getenv("MYGIT_DIR", ".mygit")
DEFAULT_BRANCH = os.getenv("MYGIT_DEFAULT_BRANCH", "master")
REMOTE_URL = os.getenv("MYGIT_REMOTE_URL", "http://localhost:8000/api/git")
REMOTE_TIMEOUT = float(os.getenv("MYGIT_REMOTE_TIMEOUT", "30"))
IGNORE_FILE = ".mygitignore"

# git-log style, rendered in local time
DATE_FORMAT = "%a %b %d %H:%M:%S %Y %z"


def author_identity():
    """Return ``"name <email>"`` for commit author and committer lines.

    Read at call time so tests and shells can change identity with env vars.
    """
    name = os.getenv("MYGIT_AUTHOR_NAME") or getpass.getuser()
    email = os.getenv("MYGIT_AUTHOR_EMAIL") or f"{name}@example.com"
    return f"{name} <{email}>"
