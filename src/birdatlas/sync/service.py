"""Registry of cached reads and invalidating writes over the remote actor.

Every read is a ``@cached_query`` keyed by a namespace from
:mod:`birdatlas.sync.keys` and coerced into entity models before it reaches
the cache. Every write is an ``@invalidates`` mutation: local validation runs
first, the actor call runs exactly once, and on success the write's
namespaces are marked stale.
"""

import logging
from collections.abc import Callable
from typing import Any

from birdatlas.actor import boundary
from birdatlas.actor.interface import Actor
from birdatlas.birds.models import (
    BirdDraft,
    BirdRecord,
    LocationData,
    LocationEntry,
    TeamGroup,
    TeamMember,
)
from birdatlas.cache.decorator import cached_query, invalidates
from birdatlas.cache.query_cache import QueryCache, QueryObserver, QueryResult
from birdatlas.errors import RemoteCallError
from birdatlas.gate.models import UserProfile, UserRole
from birdatlas.storage.models import FileReference
from birdatlas.sync import keys
from birdatlas.sync.session import Session
from birdatlas.sync.validation import (
    parse_latitude,
    parse_longitude,
    validate_bird_draft,
    validate_bird_id,
    validate_bird_name,
    validate_bird_record,
    validate_bird_records,
    validate_bird_update,
    validate_changes,
    validate_named_path,
    validate_new_location,
    validate_path,
    validate_profile,
    validate_role_assignment,
    validate_team_member,
)

logger = logging.getLogger(__name__)


class BirdAtlasService:
    """Cached access to the bird data service for one session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # ---- Session delegation ----

    @property
    def cache(self) -> QueryCache:
        return self.session.cache

    @property
    def actor(self) -> Actor:
        return self.session.require_actor()

    @property
    def actor_ready(self) -> bool:
        return self.session.actor_ready

    @property
    def identity_ready(self) -> bool:
        return self.session.identity_ready

    @property
    def principal(self) -> str | None:
        return self.session.principal

    def require_actor(self, operation: str = "") -> Actor:
        return self.session.require_actor(operation)

    # ---- Bird reads ----

    @cached_query(keys.ALL_BIRD_DATA)
    async def get_all_bird_data(self) -> list[BirdRecord]:
        payload = await self.actor.get_all_bird_data()
        return boundary.coerce_bird_entries(payload, "getAllBirdData")

    @cached_query(keys.ALL_BIRD_DETAILS)
    async def get_all_bird_details(self) -> list[BirdRecord]:
        payload = await self.actor.get_all_bird_details()
        return boundary.coerce_bird_entries(payload, "getAllBirdDetails")

    @cached_query(keys.BIRD_DETAILS)
    async def get_bird_details(self, bird_name: str) -> BirdRecord | None:
        payload = await self.actor.get_bird_details(bird_name)
        bird = boundary.coerce_optional(BirdRecord, payload, "getBirdDetails")
        if bird is not None and not bird.name:
            bird = bird.model_copy(update={"name": bird_name})
        return bird

    @cached_query(keys.BIRD_NAMES)
    async def get_bird_names(self) -> list[str]:
        payload = await self.actor.get_bird_names()
        return boundary.coerce_value(list[str], payload or [], "getBirdNames")

    @cached_query(keys.BIRD_LOCATIONS)
    async def get_bird_locations(self, bird_name: str) -> list[LocationEntry]:
        payload = boundary.unwrap_option(await self.actor.get_bird_locations(bird_name))
        return boundary.coerce_list(LocationEntry, payload, "getBirdLocations")

    @cached_query(keys.BIRD_EXISTS)
    async def bird_exists(self, bird_name: str) -> bool:
        payload = await self.actor.bird_exists(bird_name)
        return boundary.coerce_value(bool, payload, "birdExists")

    @cached_query(keys.SUB_IMAGES)
    async def get_sub_images(self, bird_name: str) -> list[str]:
        payload = await self.actor.get_sub_images(bird_name)
        return boundary.coerce_value(list[str], payload or [], "getSubImages")

    @cached_query(keys.AUDIO_FILE)
    async def get_audio_file(self, bird_name: str) -> str | None:
        payload = boundary.unwrap_option(await self.actor.get_audio_file(bird_name))
        return boundary.coerce_value(str | None, payload, "getAudioFile") or None

    @cached_query(keys.HAS_AUDIO_FILE)
    async def has_audio_file(self, bird_name: str) -> bool:
        payload = await self.actor.has_audio_file(bird_name)
        return boundary.coerce_value(bool, payload, "hasAudioFile")

    # ---- Location and statistics reads ----

    @cached_query(keys.ALL_LOCATIONS)
    async def get_all_locations_with_names(self) -> list[LocationData]:
        payload = await self.actor.get_all_locations_with_names()
        return boundary.coerce_list(LocationData, payload, "getAllLocationsWithNames")

    @cached_query(keys.ALL_LOCATIONS_FOR_MAP, require_args=False)
    async def get_all_locations_for_map(self, filter_text: str = "") -> list[LocationData]:
        payload = await self.actor.get_all_locations_for_map(filter_text)
        return boundary.coerce_list(LocationData, payload, "getAllLocationsForMap")

    @cached_query(keys.LOCATION_COUNT)
    async def get_location_count_by_bird(self) -> dict[str, int]:
        payload = await self.actor.get_location_count_by_bird()
        pairs = boundary.coerce_value(
            list[tuple[str, int]], payload or [], "getLocationCountByBird"
        )
        return dict(pairs)

    @cached_query(keys.TOTAL_BIRD_COUNT)
    async def get_total_bird_count(self) -> int:
        payload = await self.actor.get_total_bird_count()
        return boundary.coerce_value(int, payload, "getTotalBirdCount")

    @cached_query(keys.TOTAL_LOCATION_COUNT)
    async def get_total_location_count(self) -> int:
        payload = await self.actor.get_total_location_count()
        return boundary.coerce_value(int, payload, "getTotalLocationCount")

    @cached_query(keys.ACTIVE_MAP_REFERENCE)
    async def get_active_map_reference(self) -> FileReference | None:
        payload = await self.actor.get_active_map_reference()
        return boundary.coerce_optional(FileReference, payload, "getActiveMapReference")

    @cached_query(keys.BACKUP_MAP_REFERENCE)
    async def get_backup_map_reference(self) -> str | None:
        payload = boundary.unwrap_option(await self.actor.get_backup_map_reference())
        return boundary.coerce_value(str | None, payload, "getBackupMapReference") or None

    @cached_query(keys.FILE_REFERENCES)
    async def list_file_references(self) -> list[FileReference]:
        payload = await self.actor.list_file_references()
        return boundary.coerce_list(FileReference, payload, "listFileReferences")

    @cached_query(keys.FILE_REFERENCE)
    async def get_file_reference(self, path: str) -> FileReference | None:
        payload = await self.actor.get_file_reference(path)
        return boundary.coerce_optional(FileReference, payload, "getFileReference")

    @cached_query(keys.TEAM_MEMBERS)
    async def get_team_members(self) -> list[TeamMember]:
        payload = await self.actor.get_team_members()
        members = boundary.coerce_list(TeamMember, payload, "getTeamMembers")
        return sorted(members, key=lambda m: m.number)

    @cached_query(keys.TEAM_GROUPS)
    async def get_team_groups(self) -> TeamGroup:
        payload = await self.actor.get_team_groups()
        if payload is None:
            return TeamGroup()
        return boundary.coerce(TeamGroup, payload, "getTeamGroups")

    # ---- Caller identity reads ----

    @cached_query(keys.CALLER_USER_PROFILE, requires_identity=True)
    async def get_caller_user_profile(self) -> UserProfile | None:
        payload = await self.actor.get_caller_user_profile()
        return boundary.coerce_optional(UserProfile, payload, "getCallerUserProfile")

    @cached_query(keys.CALLER_USER_ROLE, requires_identity=True)
    async def get_caller_user_role(self) -> UserRole:
        payload = await self.actor.get_caller_user_role()
        return boundary.coerce_role(payload, "getCallerUserRole")

    @cached_query(keys.IS_ADMIN, requires_identity=True)
    async def is_caller_admin(self) -> bool:
        payload = await self.actor.is_caller_admin()
        return payload is True

    @cached_query(keys.CAN_MODIFY_DATA, requires_identity=True)
    async def can_modify_data(self) -> bool:
        try:
            payload = await self.actor.can_caller_modify_data()
        except RemoteCallError as e:
            logger.warning("Modify permission check failed; denying", extra={"error": str(e)})
            return False
        return payload is True

    # ---- Bird writes ----

    @invalidates(*keys.BIRD_DATA_KEYS, validate=validate_new_location)
    async def add_location(
        self,
        bird_name: str,
        latitude: float | str,
        longitude: float | str,
        mountain_name: str = "",
        valley_name: str = "",
        governorate: str = "",
        notes: str = "",
        location_desc: str = "",
    ) -> bool:
        """Add a sighting location, creating the bird if the name is new.

        Returns:
            True if the bird already existed
        """
        bird_name = bird_name.strip()
        existed = boundary.coerce_value(
            bool, await self.actor.bird_exists(bird_name), "birdExists"
        )
        await self.actor.add_bird_data(
            bird_name,
            parse_latitude(latitude),
            parse_longitude(longitude),
            mountain_name,
            valley_name,
            governorate,
            notes,
            location_desc,
        )
        logger.info(
            "Location added", extra={"bird_name": bird_name, "new_bird": not existed}
        )
        return existed

    @invalidates(*keys.MEDIA_KEYS, validate=validate_bird_draft)
    async def add_bird_with_details(self, draft: BirdDraft) -> Any:  # noqa: ANN401
        """Create a bird with its first location and any uploaded media."""
        result = await self.actor.add_bird_with_details(
            draft.arabic_name.strip(),
            draft.scientific_name,
            draft.english_name,
            draft.description,
            draft.notes,
            parse_latitude(draft.latitude),
            parse_longitude(draft.longitude),
            draft.mountain_name,
            draft.valley_name,
            draft.governorate,
            draft.location,
            draft.audio_file_path,
            list(draft.sub_images),
        )
        logger.info("Bird created", extra={"bird_name": draft.arabic_name})
        return result

    @invalidates(*keys.BIRD_DATA_KEYS, validate=validate_bird_record)
    async def save_bird(self, record: BirdRecord) -> Any:  # noqa: ANN401
        return await self.actor.save_bird_data(record.to_remote())

    @invalidates(*keys.BIRD_DATA_KEYS, validate=validate_changes)
    async def save_changes(self, bird_name: str, record: BirdRecord) -> Any:  # noqa: ANN401
        return await self.actor.save_changes(bird_name, record.to_remote())

    @invalidates(*keys.BIRD_DATA_KEYS, validate=validate_bird_records)
    async def save_all_bird_data(self, records: list[BirdRecord]) -> Any:  # noqa: ANN401
        entries = [[record.name or record.display_name, record.to_remote()] for record in records]
        return await self.actor.save_all_bird_data(entries)

    @invalidates(*keys.BIRD_DATA_KEYS, validate=validate_bird_update)
    async def update_bird_details(
        self,
        bird_name: str,
        arabic_name: str,
        scientific_name: str,
        english_name: str,
        description: str,
        notes: str,
    ) -> Any:  # noqa: ANN401
        return await self.actor.update_bird_details(
            bird_name, arabic_name, scientific_name, english_name, description, notes
        )

    @invalidates(*keys.BIRD_DATA_KEYS, validate=validate_bird_name)
    async def update_description_and_notes(
        self, bird_name: str, description: str, notes: str
    ) -> Any:  # noqa: ANN401
        return await self.actor.update_description_and_notes(bird_name, description, notes)

    @invalidates(*keys.MEDIA_KEYS, validate=validate_bird_name)
    async def delete_bird(self, bird_name: str) -> Any:  # noqa: ANN401
        result = await self.actor.delete_bird_data(bird_name)
        logger.info("Bird deleted", extra={"bird_name": bird_name})
        return result

    @invalidates(*keys.MEDIA_KEYS, validate=validate_bird_id)
    async def delete_bird_by_id(self, bird_id: int) -> Any:  # noqa: ANN401
        result = await self.actor.delete_bird_by_id(bird_id)
        logger.info("Bird deleted", extra={"bird_id": bird_id})
        return result

    # ---- Media writes ----

    @invalidates(*keys.MEDIA_KEYS, validate=validate_named_path)
    async def add_sub_image(self, bird_name: str, image_path: str) -> Any:  # noqa: ANN401
        return await self.actor.add_sub_image(bird_name, image_path)

    @invalidates(*keys.MEDIA_KEYS, validate=validate_named_path)
    async def delete_sub_image(self, bird_name: str, image_path: str) -> Any:  # noqa: ANN401
        return await self.actor.delete_image_from_bird_and_registry(bird_name, image_path)

    @invalidates(*keys.MEDIA_KEYS, validate=validate_named_path)
    async def add_audio_file(self, bird_name: str, audio_path: str) -> Any:  # noqa: ANN401
        return await self.actor.add_audio_file(bird_name, audio_path)

    @invalidates(*keys.MEDIA_KEYS, validate=validate_bird_name)
    async def delete_audio_file(self, bird_name: str) -> Any:  # noqa: ANN401
        return await self.actor.delete_audio_file(bird_name)

    @invalidates(*keys.FILE_KEYS, validate=validate_path)
    async def register_file_reference(self, path: str, file_hash: str) -> Any:  # noqa: ANN401
        return await self.actor.register_file_reference(path, file_hash)

    @invalidates(*keys.MAP_KEYS, validate=validate_path)
    async def drop_file_reference(self, path: str) -> Any:  # noqa: ANN401
        return await self.actor.drop_file_reference(path)

    @invalidates(*keys.MAP_KEYS, validate=validate_path)
    async def upload_map_image(self, map_path: str) -> Any:  # noqa: ANN401
        return await self.actor.upload_map_image(map_path)

    @invalidates(*keys.MAP_KEYS)
    async def restore_backup_map(self) -> Any:  # noqa: ANN401
        """Make the backed-up regional map the active one again."""
        result = await self.actor.restore_backup_map()
        logger.info("Backup map restored")
        return result

    @invalidates(*keys.FILE_KEYS, validate=validate_path)
    async def delete_image_from_gallery(self, image_path: str) -> Any:  # noqa: ANN401
        """Remove an image from the shared gallery, leaving birds that use it untouched."""
        return await self.actor.delete_image_from_gallery(image_path)

    @invalidates(*keys.MEDIA_KEYS, validate=validate_path)
    async def delete_image_from_gallery_and_birds(self, image_path: str) -> Any:  # noqa: ANN401
        """Remove an image from the gallery and from every bird that references it."""
        result = await self.actor.delete_image_from_gallery_and_birds(image_path)
        logger.info("Gallery image deleted", extra={"path": image_path})
        return result

    # ---- Profile, roles and team ----

    @invalidates(*keys.PROFILE_KEYS, validate=validate_profile)
    async def save_caller_user_profile(self, profile: UserProfile) -> Any:  # noqa: ANN401
        return await self.actor.save_caller_user_profile(profile.model_dump())

    @invalidates(*keys.PERMISSION_KEYS, *keys.PROFILE_KEYS, validate=validate_role_assignment)
    async def assign_caller_user_role(self, principal: str, role: UserRole) -> Any:  # noqa: ANN401
        return await self.actor.assign_caller_user_role(principal, UserRole(role).value)

    @invalidates(*keys.TEAM_KEYS, validate=validate_team_member)
    async def add_team_member(
        self,
        full_name_tribe: str,
        university: str = "",
        specialization: str = "",
        residence: str = "",
        contact_number: str = "",
        number: int = 0,
    ) -> Any:  # noqa: ANN401
        return await self.actor.add_team_member(
            full_name_tribe, university, specialization, residence, contact_number, number
        )

    # ---- Cache control ----

    def refresh_all(self) -> int:
        """Drop every bird-derived entry and mark observed ones for refetch.

        Returns:
            Number of entries removed
        """
        removed = self.cache.remove(keys.BIRD_DATA_KEYS)
        self.cache.invalidate(keys.BIRD_DATA_KEYS)
        logger.info("Bird data refresh requested", extra={"removed": removed})
        return removed

    def observe(
        self,
        query: Callable[..., Any],
        *args: Any,
        callback: Callable[[QueryResult], None] | None = None,
    ) -> QueryObserver:
        """Mount a cached read so it refetches whenever its key is invalidated.

        Args:
            query: A ``@cached_query`` method of this service, bound or unbound
            *args: Arguments of the read
            callback: Receives each settled result

        Example:
            observer = service.observe(service.get_bird_details, "Hoopoe", callback=render)
        """
        func = getattr(query, "__func__", query)
        fetcher = func.fetcher

        async def fetch() -> Any:  # noqa: ANN401
            return await fetcher(self, *args)

        return self.cache.observe(
            func.key_for(self, args), fetch, callback, enabled=func.enabled_for(self, args)
        )
