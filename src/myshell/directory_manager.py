import os
from typing import Optional


class DirectoryManager:
    """
    Manages the working directory of the interpreter and directory validation.

    The working directory is process-wide state owned by the operating system,
    so cd and pwd act on it directly.
    """

    def validate_directory(self, directory: Optional[str]) -> None:
        """
        Validate if the directory exists and is accessible.

        Args:
            directory (Optional[str]): Directory path to validate

        Raises:
            ValueError: If the directory doesn't exist, not absolute or is not accessible
        """
        # make directory required
        if directory is None:
            raise ValueError("Directory is required")

        # verify directory is absolute path
        if not os.path.isabs(directory):
            raise ValueError(f"Directory must be an absolute path: {directory}")

        if not os.path.exists(directory):
            raise ValueError(f"Directory does not exist: {directory}")

        if not os.path.isdir(directory):
            raise ValueError(f"Not a directory: {directory}")

        if not os.access(directory, os.R_OK | os.X_OK):
            raise ValueError(f"Directory is not accessible: {directory}")

    def get_home_directory(self) -> str:
        """
        Get the home directory from the environment.

        Raises:
            ValueError: If HOME is not set
        """
        home = os.environ.get("HOME")
        if not home:
            raise ValueError("HOME is not set")
        return home

    def change_directory(self, path: Optional[str] = None) -> None:
        """
        Change the working directory, defaulting to the home directory.

        Args:
            path (Optional[str]): Target directory, None for home

        Raises:
            ValueError: If the directory cannot be entered
        """
        target = self.get_home_directory() if path is None else path
        try:
            os.chdir(target)
        except OSError as e:
            raise ValueError(f"Cannot change directory to {target}") from e

    def current_directory(self) -> str:
        """
        Get the working directory.

        Raises:
            ValueError: If the working directory cannot be determined
        """
        try:
            return os.getcwd()
        except OSError as e:
            raise ValueError("Cannot determine working directory") from e
