"""Tests for the dependency injection container."""

import pytest

from birdatlas.actor.client import HttpActor
from birdatlas.config.models import BirdAtlasConfig
from birdatlas.container import Container
from birdatlas.gate.models import Identity
from birdatlas.storage.blob_storage import HttpBlobStorage
from birdatlas.storage.uploads import UploadFlow
from birdatlas.sync.service import BirdAtlasService


@pytest.fixture
def container(path_resolver):
    container = Container()
    container.path_resolver.override(path_resolver)
    return container


class TestContainer:
    """Test provider wiring."""

    def test_loads_config_from_data_dir(self, container, path_resolver):
        """Should load (and create) the config under the data directory."""
        config = container.config()

        assert isinstance(config, BirdAtlasConfig)
        assert path_resolver.get_config_path().exists()

    def test_service_shares_one_session(self, container):
        """Should hand every consumer the same session and cache."""
        service = container.service()

        assert isinstance(service, BirdAtlasService)
        assert service.session is container.session()
        assert service.cache is container.query_cache()
        assert container.session().gate is container.admin_gate()

    def test_actor_factory_binds_identity(self, container):
        """Should build HTTP actors for the configured service."""
        actor = container.actor_factory()(Identity(principal="aaaaa-aa"))

        assert isinstance(actor, HttpActor)
        assert actor.base_url == "http://localhost:8000"
        assert actor.identity.principal == "aaaaa-aa"

    def test_query_cache_uses_config(self, container):
        """Should apply the configured stale time."""
        assert container.query_cache().stale_time == 5.0

    def test_upload_flow(self, container):
        """Should wire uploads to the shared service and blob storage."""
        flow = container.upload_flow()

        assert isinstance(flow, UploadFlow)
        assert isinstance(flow.storage, HttpBlobStorage)
        assert flow.service is container.service()
        assert flow.storage is container.blob_storage()

    def test_report_renderer_uses_config_title(self, container):
        """Should title reports from the config."""
        assert container.report_renderer().title == "تقرير بيانات الطيور"
