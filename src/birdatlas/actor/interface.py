"""Capability-typed handle for the remote bird data service.

Every backend operation is one async method. Methods return the decoded
payload untouched; coercion into entity models happens in the service layer
so that the actor stays a thin transport. Any failure surfaces as
:class:`~birdatlas.errors.RemoteCallError`.
"""

from abc import ABC, abstractmethod
from typing import Any


class Actor(ABC):
    """Remote service client.

    Subclasses implement :meth:`call`; the named methods below mirror the
    backend's interface one to one.
    """

    @abstractmethod
    async def call(self, method: str, *args: Any) -> Any:  # noqa: ANN401
        """Invoke a backend method by its wire name.

        Raises:
            RemoteCallError: If the call is rejected for any reason
        """

    async def start(self) -> None:  # noqa: B027
        """Open any underlying connection."""

    async def stop(self) -> None:  # noqa: B027
        """Release any underlying connection."""

    # ---- Bird reads ----

    async def get_all_bird_data(self) -> Any:  # noqa: ANN401
        return await self.call("getAllBirdData")

    async def get_all_bird_details(self) -> Any:  # noqa: ANN401
        return await self.call("getAllBirdDetails")

    async def get_bird_details(self, bird_name: str) -> Any:  # noqa: ANN401
        return await self.call("getBirdDetails", bird_name)

    async def get_bird_names(self) -> Any:  # noqa: ANN401
        return await self.call("getBirdNames")

    async def get_bird_locations(self, bird_name: str) -> Any:  # noqa: ANN401
        return await self.call("getBirdLocations", bird_name)

    async def bird_exists(self, bird_name: str) -> Any:  # noqa: ANN401
        return await self.call("birdExists", bird_name)

    async def get_sub_images(self, bird_name: str) -> Any:  # noqa: ANN401
        return await self.call("getSubImages", bird_name)

    async def get_audio_file(self, bird_name: str) -> Any:  # noqa: ANN401
        return await self.call("getAudioFile", bird_name)

    async def has_audio_file(self, bird_name: str) -> Any:  # noqa: ANN401
        return await self.call("hasAudioFile", bird_name)

    # ---- Location and statistics reads ----

    async def get_all_locations_with_names(self) -> Any:  # noqa: ANN401
        return await self.call("getAllLocationsWithNames")

    async def get_all_locations_for_map(self, filter_text: str) -> Any:  # noqa: ANN401
        return await self.call("getAllLocationsForMap", filter_text)

    async def get_location_count_by_bird(self) -> Any:  # noqa: ANN401
        return await self.call("getLocationCountByBird")

    async def get_total_bird_count(self) -> Any:  # noqa: ANN401
        return await self.call("getTotalBirdCount")

    async def get_total_location_count(self) -> Any:  # noqa: ANN401
        return await self.call("getTotalLocationCount")

    async def get_active_map_reference(self) -> Any:  # noqa: ANN401
        return await self.call("getActiveMapReference")

    async def get_backup_map_reference(self) -> Any:  # noqa: ANN401
        return await self.call("getBackupMapReference")

    # ---- Bird writes ----

    async def add_bird_data(
        self,
        bird_name: str,
        latitude: float,
        longitude: float,
        mountain_name: str,
        valley_name: str,
        governorate: str,
        notes: str,
        location_desc: str,
    ) -> Any:  # noqa: ANN401
        return await self.call(
            "addBirdData",
            bird_name,
            latitude,
            longitude,
            mountain_name,
            valley_name,
            governorate,
            notes,
            location_desc,
        )

    async def add_bird_with_details(
        self,
        arabic_name: str,
        scientific_name: str,
        english_name: str,
        description: str,
        notes: str,
        latitude: float,
        longitude: float,
        mountain_name: str,
        valley_name: str,
        governorate: str,
        location_desc: str,
        audio_file_path: str | None,
        sub_images: list[str],
    ) -> Any:  # noqa: ANN401
        return await self.call(
            "addBirdWithDetails",
            arabic_name,
            scientific_name,
            english_name,
            description,
            notes,
            latitude,
            longitude,
            mountain_name,
            valley_name,
            governorate,
            location_desc,
            audio_file_path,
            sub_images,
        )

    async def save_bird_data(self, bird: dict[str, Any]) -> Any:  # noqa: ANN401
        return await self.call("saveBirdData", bird)

    async def save_changes(self, bird_name: str, bird: dict[str, Any]) -> Any:  # noqa: ANN401
        return await self.call("saveChanges", bird_name, bird)

    async def save_all_bird_data(self, entries: list[list[Any]]) -> Any:  # noqa: ANN401
        return await self.call("saveAllBirdData", entries)

    async def update_bird_details(
        self,
        bird_name: str,
        arabic_name: str,
        scientific_name: str,
        english_name: str,
        description: str,
        notes: str,
    ) -> Any:  # noqa: ANN401
        return await self.call(
            "updateBirdDetails",
            bird_name,
            arabic_name,
            scientific_name,
            english_name,
            description,
            notes,
        )

    async def update_description_and_notes(
        self, bird_name: str, description: str, notes: str
    ) -> Any:  # noqa: ANN401
        return await self.call("updateDescriptionAndNotes", bird_name, description, notes)

    async def delete_bird_data(self, bird_name: str) -> Any:  # noqa: ANN401
        return await self.call("deleteBirdData", bird_name)

    async def delete_bird_by_id(self, bird_id: int) -> Any:  # noqa: ANN401
        return await self.call("deleteBirdById", bird_id)

    # ---- Media ----

    async def add_sub_image(self, bird_name: str, image_path: str) -> Any:  # noqa: ANN401
        return await self.call("addSubImage", bird_name, image_path)

    async def delete_image_from_bird_and_registry(
        self, bird_name: str, image_path: str
    ) -> Any:  # noqa: ANN401
        return await self.call("deleteImageFromBirdAndRegistry", bird_name, image_path)

    async def add_audio_file(self, bird_name: str, audio_path: str) -> Any:  # noqa: ANN401
        return await self.call("addAudioFile", bird_name, audio_path)

    async def delete_audio_file(self, bird_name: str) -> Any:  # noqa: ANN401
        return await self.call("deleteAudioFile", bird_name)

    async def upload_map_image(self, map_path: str) -> Any:  # noqa: ANN401
        return await self.call("uploadMapImage", map_path)

    async def restore_backup_map(self) -> Any:  # noqa: ANN401
        return await self.call("restoreBackupMap")

    async def delete_image_from_gallery(self, image_path: str) -> Any:  # noqa: ANN401
        return await self.call("deleteImageFromGallery", image_path)

    async def delete_image_from_gallery_and_birds(self, image_path: str) -> Any:  # noqa: ANN401
        return await self.call("deleteImageFromGalleryAndBirds", image_path)

    # ---- File references ----

    async def list_file_references(self) -> Any:  # noqa: ANN401
        return await self.call("listFileReferences")

    async def get_file_reference(self, path: str) -> Any:  # noqa: ANN401
        return await self.call("getFileReference", path)

    async def register_file_reference(self, path: str, file_hash: str) -> Any:  # noqa: ANN401
        return await self.call("registerFileReference", path, file_hash)

    async def drop_file_reference(self, path: str) -> Any:  # noqa: ANN401
        return await self.call("dropFileReference", path)

    # ---- Identity and roles ----

    async def get_caller_user_profile(self) -> Any:  # noqa: ANN401
        return await self.call("getCallerUserProfile")

    async def save_caller_user_profile(self, profile: dict[str, Any]) -> Any:  # noqa: ANN401
        return await self.call("saveCallerUserProfile", profile)

    async def get_caller_user_role(self) -> Any:  # noqa: ANN401
        return await self.call("getCallerUserRole")

    async def is_caller_admin(self) -> Any:  # noqa: ANN401
        return await self.call("isCallerAdmin")

    async def can_caller_modify_data(self) -> Any:  # noqa: ANN401
        return await self.call("canCallerModifyData")

    async def assign_caller_user_role(self, principal: str, role: str) -> Any:  # noqa: ANN401
        return await self.call("assignCallerUserRole", principal, role)

    # ---- Team roster ----

    async def get_team_members(self) -> Any:  # noqa: ANN401
        return await self.call("getTeamMembers")

    async def get_team_groups(self) -> Any:  # noqa: ANN401
        return await self.call("getTeamGroups")

    async def add_team_member(
        self,
        full_name_tribe: str,
        university: str,
        specialization: str,
        residence: str,
        contact_number: str,
        number: int,
    ) -> Any:  # noqa: ANN401
        return await self.call(
            "addTeamMember",
            full_name_tribe,
            university,
            specialization,
            residence,
            contact_number,
            number,
        )
