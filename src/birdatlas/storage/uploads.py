"""Upload-then-register flows for bird media.

Each flow stores the blob first, then registers a content-hash reference with
the backend, then (for attachments) links the path to a bird. A blob whose
registration fails is reported through :class:`UploadError` with
``uploaded=True`` so the caller can drop it.
"""

import hashlib
import logging
import mimetypes
import re
import time
from collections.abc import Awaitable, Callable
from typing import Any

from birdatlas.birds.models import BirdDraft
from birdatlas.errors import BirdAtlasError, UploadError
from birdatlas.storage.blob_storage import BlobStorage
from birdatlas.storage.models import FileReference
from birdatlas.sync.service import BirdAtlasService

logger = logging.getLogger(__name__)

IMAGE_PREFIX = "images"
AUDIO_PREFIX = "audio"
MAP_PATH = "maps/active-map.png"

_UNSAFE_CHARS = re.compile(r"[\\/\s]+")


def storage_name(file_name: str) -> str:
    """Make a file name safe to use as the last path segment."""
    return _UNSAFE_CHARS.sub("_", file_name.strip()) or "file"


def content_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def guess_content_type(file_name: str) -> str | None:
    content_type, _ = mimetypes.guess_type(file_name)
    return content_type


class UploadFlow:
    """Media uploads for one session."""

    def __init__(
        self,
        service: BirdAtlasService,
        storage: BlobStorage,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.service = service
        self.storage = storage
        self._clock = clock

    def build_path(self, prefix: str, file_name: str) -> str:
        """Return ``<prefix>/<epoch ms>_<name>``."""
        millis = int(self._clock() * 1000)
        return f"{prefix}/{millis}_{storage_name(file_name)}"

    async def upload_image(self, file_name: str, data: bytes) -> FileReference:
        self._check_type(file_name, "image/")
        return await self._store(self.build_path(IMAGE_PREFIX, file_name), file_name, data)

    async def upload_audio(self, file_name: str, data: bytes) -> FileReference:
        self._check_type(file_name, "audio/")
        return await self._store(self.build_path(AUDIO_PREFIX, file_name), file_name, data)

    async def attach_image(self, bird_name: str, file_name: str, data: bytes) -> FileReference:
        """Upload an image and add it to a bird's gallery."""
        reference = await self.upload_image(file_name, data)
        await self._link(reference, self.service.add_sub_image(bird_name, reference.path))
        return reference

    async def attach_audio(self, bird_name: str, file_name: str, data: bytes) -> FileReference:
        """Upload an audio recording and set it as a bird's audio file."""
        reference = await self.upload_audio(file_name, data)
        await self._link(reference, self.service.add_audio_file(bird_name, reference.path))
        return reference

    async def replace_map(self, file_name: str, data: bytes) -> FileReference:
        """Upload a new regional map and make it the active one."""
        self._check_type(file_name, "image/")
        reference = await self._store(MAP_PATH, file_name, data)
        await self._link(reference, self.service.upload_map_image(reference.path))
        return reference

    async def create_bird_with_media(
        self,
        draft: BirdDraft,
        images: list[tuple[str, bytes]] | None = None,
        audio: tuple[str, bytes] | None = None,
    ) -> BirdDraft:
        """Upload the audio, then each image, then create the bird.

        Returns:
            The draft as submitted, with the uploaded media paths filled in

        Raises:
            UploadError: With ``uploaded=True`` and every stored blob in
                ``orphaned_paths`` when a later upload or the creation itself
                fails after something was stored
        """
        stored: list[str] = []
        try:
            audio_path = draft.audio_file_path
            if audio is not None:
                audio_path = (await self.upload_audio(*audio)).path
                stored.append(audio_path)

            image_paths = list(draft.sub_images)
            for file_name, data in images or []:
                image_path = (await self.upload_image(file_name, data)).path
                image_paths.append(image_path)
                stored.append(image_path)

            submitted = draft.model_copy(
                update={"audio_file_path": audio_path, "sub_images": image_paths}
            )
            await self.service.add_bird_with_details(submitted)
        except BirdAtlasError as e:
            if not stored:
                raise
            orphans = stored + (e.orphaned_paths if isinstance(e, UploadError) else [])
            logger.warning(
                "Bird creation failed after media upload",
                extra={"bird_name": draft.arabic_name, "orphaned_paths": orphans},
            )
            failed_path = e.path if isinstance(e, UploadError) else draft.arabic_name
            raise UploadError(
                failed_path, f"Bird not created: {e}", uploaded=True, orphaned_paths=orphans
            ) from e
        return submitted

    def _check_type(self, file_name: str, family: str) -> None:
        content_type = guess_content_type(file_name)
        if content_type is None or not content_type.startswith(family):
            raise UploadError(file_name, f"Expected a {family.rstrip('/')} file")

    async def _store(self, path: str, file_name: str, data: bytes) -> FileReference:
        if not data:
            raise UploadError(path, "File is empty")
        await self.storage.upload(path, data, guess_content_type(file_name))

        reference = FileReference(hash=content_hash(data), path=path)
        try:
            await self.service.register_file_reference(reference.path, reference.hash)
        except BirdAtlasError as e:
            logger.warning(
                "Blob stored but reference registration failed",
                extra={"path": path, "error": str(e)},
            )
            raise UploadError(path, f"Registration failed: {e}", uploaded=True) from e

        logger.info("File uploaded", extra={"path": path, "size_bytes": len(data)})
        return reference

    async def _link(self, reference: FileReference, write: Awaitable[Any]) -> None:
        try:
            await write
        except BirdAtlasError as e:
            raise UploadError(reference.path, f"Linking failed: {e}", uploaded=True) from e
