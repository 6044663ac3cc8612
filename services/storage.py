"""Local disk storage for uploaded files."""
import os
import shutil
from pathlib import Path
from typing import BinaryIO, Optional
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class LocalFileStorage:
    """Service class for storing uploaded files on local disk."""

    def __init__(self, root: str):
        """Initialize storage rooted at ``root``, creating the directory if needed."""
        self.root = Path(root)
        self._ensure_root_exists()

    def _ensure_root_exists(self) -> None:
        """Ensure the upload directory exists, create if it doesn't."""
        if not self.root.exists():
            self.root.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created upload directory: {self.root}")

    @staticmethod
    def generate_object_name(filename: str) -> str:
        """Generate a unique stored name that keeps the original extension."""
        file_extension = os.path.splitext(filename)[1].lower()
        return f"{uuid4()}{file_extension}"

    def save_file(self, file_data: BinaryIO, object_name: str) -> Optional[str]:
        """
        Write a file to the upload directory.

        Args:
            file_data: File binary data
            object_name: Name to store the file as

        Returns:
            str: Stored path if successful, None otherwise
        """
        self._ensure_root_exists()
        path = self.root / object_name

        try:
            with open(path, "wb") as out:
                shutil.copyfileobj(file_data, out)
            logger.info(f"Successfully stored {object_name} in {self.root}")
            return str(path)
        except OSError as e:
            logger.error(f"Error storing file {object_name}: {e}")
            return None

    def delete_file(self, path: str) -> bool:
        """
        Delete a stored file.

        Returns:
            bool: True if successful, False otherwise
        """
        try:
            Path(path).unlink()
            logger.info(f"Successfully deleted {path}")
            return True
        except OSError as e:
            logger.error(f"Error deleting file {path}: {e}")
            return False

    def file_exists(self, path: str) -> bool:
        return Path(path).is_file()
