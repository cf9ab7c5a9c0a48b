"""Git operations module."""

import logging
import subprocess

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Git operation error."""

    pass


class GitOperations:
    """Basic git operations handler."""

    @staticmethod
    def is_repository() -> bool:
        """Check whether the working directory is inside a git work tree."""
        try:
            subprocess.run(
                ["git", "rev-parse", "--is-inside-work-tree"],
                capture_output=True,
                text=True,
                check=True,
            )
            return True
        except (subprocess.CalledProcessError, FileNotFoundError):
            return False

    @staticmethod
    def has_staged_changes() -> bool:
        """Check whether the index differs from HEAD."""
        result = subprocess.run(
            ["git", "diff", "--staged", "--quiet"],
            capture_output=True,
            text=True,
        )
        # --quiet exits 1 when there are differences
        if result.returncode == 0:
            return False
        if result.returncode == 1:
            return True

        error_msg = result.stderr.strip() if result.stderr else f"exit status {result.returncode}"
        raise GitError(f"Failed to inspect staged changes: {error_msg}")

    @staticmethod
    def get_staged_diff() -> str:
        """Get the diff of all staged changes."""
        try:
            result = subprocess.run(
                ["git", "diff", "--staged", "--"],
                capture_output=True,
                text=True,
                check=True,
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            error_msg = e.stderr if e.stderr else str(e)
            raise GitError(f"Failed to get diff: {error_msg}")

    @staticmethod
    def create_commit(message: str, no_verify: bool = False) -> None:
        """Create a commit from the staged changes."""
        cmd = ["git", "commit", "-m", message]
        if no_verify:
            cmd.append("--no-verify")

        logger.debug("Running %s", " ".join(cmd[:2] + cmd[4:]))
        try:
            subprocess.run(cmd, capture_output=True, text=True, check=True)
        except subprocess.CalledProcessError as e:
            # Hooks such as pre-commit report their findings on stdout
            error_msg = (e.stderr or e.stdout or "").strip() or str(e)
            raise GitError(f"Failed to create commit: {error_msg}")
