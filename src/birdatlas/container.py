"""Dependency injection container for the birdatlas client."""

from dependency_injector import containers, providers

from birdatlas.actor.client import HttpActor
from birdatlas.cache.query_cache import QueryCache
from birdatlas.config.manager import ConfigManager
from birdatlas.config.models import BirdAtlasConfig
from birdatlas.export.html_export import HtmlReportRenderer
from birdatlas.gate.admin_gate import AdminGate
from birdatlas.gate.models import Identity
from birdatlas.storage.blob_storage import HttpBlobStorage
from birdatlas.storage.uploads import UploadFlow
from birdatlas.sync.service import BirdAtlasService
from birdatlas.sync.session import ActorFactory, Session
from birdatlas.system.path_resolver import PathResolver


def load_config(path_resolver: PathResolver) -> BirdAtlasConfig:
    return ConfigManager(path_resolver).load()


def create_actor_factory(config: BirdAtlasConfig) -> ActorFactory:
    """Build actors bound to the configured service, one per identity."""

    def factory(identity: Identity | None) -> HttpActor:
        return HttpActor(
            config.service.base_url, identity=identity, timeout=config.service.timeout
        )

    return factory


def create_query_cache(config: BirdAtlasConfig) -> QueryCache:
    return QueryCache(
        stale_time=config.query.stale_time,
        refetch_on_invalidate=config.query.refetch_on_invalidate,
    )


def create_blob_storage(config: BirdAtlasConfig) -> HttpBlobStorage:
    return HttpBlobStorage(config.storage.base_url, timeout=config.storage.timeout)


def create_report_renderer(config: BirdAtlasConfig) -> HtmlReportRenderer:
    return HtmlReportRenderer(title=config.export.report_title, footer=config.export.report_footer)


class Container(containers.DeclarativeContainer):
    """Application dependency injection container.

    One container serves one session: the cache, gate and session are
    singletons so every service shares them.
    """

    path_resolver = providers.Singleton(PathResolver)

    config = providers.Singleton(
        load_config,
        path_resolver=path_resolver,
    )

    actor_factory = providers.Singleton(create_actor_factory, config=config)

    query_cache = providers.Singleton(create_query_cache, config=config)

    admin_gate = providers.Singleton(AdminGate)

    session = providers.Singleton(
        Session,
        actor_factory=actor_factory,
        cache=query_cache,
        gate=admin_gate,
    )

    service = providers.Singleton(BirdAtlasService, session=session)

    blob_storage = providers.Singleton(create_blob_storage, config=config)

    upload_flow = providers.Factory(UploadFlow, service=service, storage=blob_storage)

    report_renderer = providers.Factory(create_report_renderer, config=config)
