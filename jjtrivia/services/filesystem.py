"""File system service for game bundle and library file management."""

import shutil
from pathlib import Path

import structlog

log = structlog.stdlib.get_logger()


class FileSystemService:
    """File system operations with logging; errors are logged and re-raised."""

    def ensure_directory(self, path: Path) -> None:
        """Ensure that a directory exists, creating it if necessary.

        Raises:
            OSError: If the path exists and is not a directory, or cannot be created
        """
        try:
            if path.exists():
                if not path.is_dir():
                    log.error("Path exists but is not a directory", path=str(path))
                    raise OSError(f"Path exists but is not a directory: {path}")
                return

            log.debug("Creating directory", path=str(path))
            path.mkdir(parents=True, exist_ok=True)
            log.info("Directory created successfully", path=str(path))

        except OSError as e:
            log.error("Failed to create directory", path=str(path), error=str(e))
            raise

    def copy_file(self, source: Path, destination: Path) -> None:
        """Copy a file verbatim, creating the destination directory if needed.

        Raises:
            FileNotFoundError: If the source file does not exist
            OSError: If the file cannot be copied
        """
        try:
            if not source.is_file():
                log.error("Source file not found for copy", source=str(source))
                raise FileNotFoundError(f"Source file not found: {source}")

            self.ensure_directory(destination.parent)
            shutil.copy2(source, destination)
            log.debug("File copied", source=str(source), destination=str(destination))

        except OSError as e:
            log.error("Failed to copy file", source=str(source), destination=str(destination), error=str(e))
            raise

    def copy_directory_files(self, source_dir: Path, destination_dir: Path) -> list[Path]:
        """Copy every regular file of source_dir into destination_dir (not recursive).

        Returns:
            Paths of the copied files inside destination_dir
        """
        self.ensure_directory(destination_dir)
        copied: list[Path] = []
        for item in self.list_entries(source_dir):
            if not item.is_file():
                continue
            target = destination_dir / item.name
            self.copy_file(item, target)
            copied.append(target)
        log.info(
            "Directory files copied",
            source=str(source_dir),
            destination=str(destination_dir),
            count=len(copied),
        )
        return copied

    def move_file(self, source: Path, destination: Path) -> None:
        """Move a file from source to destination.

        Raises:
            FileNotFoundError: If source file does not exist
            OSError: If file cannot be moved
        """
        try:
            if not source.is_file():
                log.error("Source file not found for move", source=str(source))
                raise FileNotFoundError(f"Source file not found: {source}")

            self.ensure_directory(destination.parent)

            log.debug("Moving file", source=str(source), destination=str(destination))
            # shutil.move works across file systems, unlike Path.replace
            shutil.move(str(source), str(destination))
            log.info("File moved successfully", source=str(source), destination=str(destination))

        except OSError as e:
            log.error("Failed to move file", source=str(source), destination=str(destination), error=str(e))
            raise

    def delete_file(self, path: Path) -> None:
        """Delete a single file.

        Raises:
            FileNotFoundError: If file does not exist
            OSError: If file cannot be deleted
        """
        try:
            if not path.exists():
                log.warning("Attempted to delete non-existent file", path=str(path))
                raise FileNotFoundError(f"File not found: {path}")

            if not path.is_file():
                log.error("Attempted to delete non-file", path=str(path))
                raise OSError(f"Path is not a file: {path}")

            path.unlink()
            log.info("File deleted successfully", path=str(path))

        except OSError as e:
            log.error("Failed to delete file", path=str(path), error=str(e))
            raise

    def delete_directory(self, path: Path) -> None:
        """Recursively delete a directory.

        Raises:
            FileNotFoundError: If the directory does not exist
            OSError: If the directory cannot be deleted
        """
        try:
            if not path.is_dir():
                log.warning("Attempted to delete non-existent directory", path=str(path))
                raise FileNotFoundError(f"Directory not found: {path}")

            shutil.rmtree(path)
            log.info("Directory deleted successfully", path=str(path))

        except OSError as e:
            log.error("Failed to delete directory", path=str(path), error=str(e))
            raise

    def list_entries(self, directory: Path) -> list[Path]:
        """List files and sub-directories of a directory, sorted by name.

        Raises:
            FileNotFoundError: If directory does not exist
            OSError: If directory cannot be accessed
        """
        try:
            if not directory.is_dir():
                log.error("Directory not found for listing", directory=str(directory))
                raise FileNotFoundError(f"Directory not found: {directory}")

            entries = sorted(directory.iterdir(), key=lambda p: p.name)
            log.debug("Listed directory", directory=str(directory), count=len(entries))
            return entries

        except OSError as e:
            log.error("Failed to list directory", directory=str(directory), error=str(e))
            raise
