"""Query key namespaces and the invalidation map.

Each read operation is cached under ``(namespace, *args)``. A write declares
which namespaces its success makes stale; invalidation by namespace covers
every argument variant of that namespace.
"""

ALL_BIRD_DATA = "allBirdData"
ALL_BIRD_DETAILS = "allBirdDetails"
BIRD_NAMES = "birdNames"
BIRD_DETAILS = "birdDetails"
BIRD_LOCATIONS = "birdLocations"
BIRD_EXISTS = "birdExists"
ALL_LOCATIONS = "allLocations"
ALL_LOCATIONS_FOR_MAP = "allLocationsForMap"
LOCATION_COUNT = "locationCount"
TOTAL_BIRD_COUNT = "totalBirdCount"
TOTAL_LOCATION_COUNT = "totalLocationCount"
SUB_IMAGES = "subImages"
AUDIO_FILE = "audioFile"
HAS_AUDIO_FILE = "hasAudioFile"
FILE_REFERENCES = "fileReferences"
ACTIVE_MAP_REFERENCE = "activeMapReference"
BACKUP_MAP_REFERENCE = "backupMapReference"
FILE_REFERENCE = "fileReference"
CALLER_USER_PROFILE = "callerUserProfile"
CALLER_USER_ROLE = "callerUserRole"
IS_ADMIN = "isAdmin"
CAN_MODIFY_DATA = "canModifyData"
TEAM_MEMBERS = "teamMembers"
TEAM_GROUPS = "teamGroups"

# Every view derived from bird records; any bird write makes all of them stale
BIRD_DATA_KEYS: tuple[str, ...] = (
    ALL_BIRD_DATA,
    ALL_BIRD_DETAILS,
    BIRD_NAMES,
    BIRD_DETAILS,
    BIRD_LOCATIONS,
    BIRD_EXISTS,
    ALL_LOCATIONS,
    ALL_LOCATIONS_FOR_MAP,
    LOCATION_COUNT,
    TOTAL_BIRD_COUNT,
    TOTAL_LOCATION_COUNT,
    SUB_IMAGES,
    AUDIO_FILE,
    HAS_AUDIO_FILE,
)

FILE_KEYS: tuple[str, ...] = (FILE_REFERENCES, FILE_REFERENCE)

MEDIA_KEYS: tuple[str, ...] = (*BIRD_DATA_KEYS, *FILE_KEYS)

PERMISSION_KEYS: tuple[str, ...] = (CALLER_USER_ROLE, IS_ADMIN, CAN_MODIFY_DATA)

PROFILE_KEYS: tuple[str, ...] = (CALLER_USER_PROFILE,)

MAP_KEYS: tuple[str, ...] = (ACTIVE_MAP_REFERENCE, BACKUP_MAP_REFERENCE, *FILE_KEYS)

TEAM_KEYS: tuple[str, ...] = (TEAM_MEMBERS, TEAM_GROUPS)
