"""Moves the remote images of a game into its bundle directory."""

from pathlib import Path

import structlog

from ..models import FULL_PROGRESS, GameDescription, ImageTask, ProgressSink
from .filesystem import FileSystemService
from .image_cache import ImageCacheService, is_remote

log = structlog.stdlib.get_logger()


def collect_image_tasks(game: GameDescription) -> list[ImageTask]:
    """Remote image references of all regular then bonus questions, question side first."""
    tasks = []
    for question in game.all_questions():
        if question.question_image and is_remote(question.question_image):
            tasks.append(ImageTask(question.question_image, question, for_question=True))
        if question.answer_image and is_remote(question.answer_image):
            tasks.append(ImageTask(question.answer_image, question, for_question=False))
    return tasks


class ImageMigrationService:
    """Fetches remote images through the cache and moves them into a bundle.

    Images are handled one at a time. A failed image is recorded and skipped;
    images already moved are never rolled back.
    """

    def __init__(self, image_cache: ImageCacheService, file_system: FileSystemService) -> None:
        self.image_cache = image_cache
        self.file_system = file_system

    async def migrate_images(self, game: GameDescription, progress: ProgressSink) -> list[str]:
        """Migrate every remote image of game into ``game.bundle_path``.

        Successful images have their question field rewritten to the bare
        bundle filename. Failed images keep their original URL.

        Returns:
            URLs that could not be fetched or moved, in processing order

        Raises:
            ValueError: If the game has no bundle directory
        """
        if game.bundle_path is None:
            raise ValueError(f"Game has no bundle directory: {game.file_path}")

        tasks = collect_image_tasks(game)
        if not tasks:
            progress.increment_progress(FULL_PROGRESS)
            return []

        increment = FULL_PROGRESS // len(tasks)
        log.info("Migrating game images", bundle=str(game.bundle_path), images=len(tasks))

        failed_urls: list[str] = []
        for task in tasks:
            try:
                filename = await self._migrate(task, game.bundle_path)
            except Exception as e:
                log.warning("Image migration failed", url=task.url, error=str(e), error_type=type(e).__name__)
                filename = None
            if filename is None:
                failed_urls.append(task.url)
            elif task.for_question:
                task.question.question_image = filename
            else:
                task.question.answer_image = filename
            progress.increment_progress(increment)

        for url in failed_urls:
            log.warning("Failed to migrate image", url=url)
        log.info(
            "Image migration finished",
            bundle=str(game.bundle_path),
            migrated=len(tasks) - len(failed_urls),
            failed=len(failed_urls),
        )
        return failed_urls

    async def _migrate(self, task: ImageTask, bundle_path: Path) -> str | None:
        cached = await self.image_cache.ensure_local(task.url)
        if cached is None:
            return None

        filename = self.image_cache.bundle_filename(task.url, cached)
        destination = bundle_path / filename
        if destination.exists():
            log.debug("Image already in bundle", url=task.url, path=str(destination))
            return filename

        try:
            self.file_system.move_file(cached, destination)
        except OSError as e:
            log.warning("Unable to move image into bundle", url=task.url, error=str(e))
            return None
        return filename
