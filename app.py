# app.py

from flask import Flask
from flask_migrate import Migrate

from config import CacheSettings, get_config
from extensions import create_redis_client, db
from logging_config import get_logger, setup_logging
from services.registry import ServiceRegistry

logger = get_logger(__name__)

_UNSET = object()


def create_app(config_name=None, test_config=None, redis_client=_UNSET):
    """
    Create and configure an instance of the Flask application.

    Args:
        config_name: 'development', 'testing' or 'production'
        test_config: Extra config values applied last
        redis_client: Redis client to use instead of one built from
            REDIS_URL; pass None to force the cache off
    """
    app = Flask(__name__)

    config_class = get_config(config_name)
    app.config.from_object(config_class)
    config_class.init_app(app)

    if test_config:
        app.config.update(test_config)

    setup_logging(app_name="message-cache", log_level=app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(app)
    Migrate(app, db)

    cache_settings = CacheSettings.from_config(app.config)
    if redis_client is _UNSET:
        redis_client = create_redis_client(cache_settings)

    app.services = _create_registry(cache_settings, redis_client)
    logger.info("Application created",
                config=config_class.__name__,
                cache_enabled=redis_client is not None)
    return app


def _create_registry(cache_settings: CacheSettings, redis_client) -> ServiceRegistry:
    """Register every repository and service with lazy factories."""
    from repositories.campaign_contact_repository import CampaignContactRepository
    from repositories.message_repository import MessageRepository
    from services.assignment_in_flight_service import AssignmentInFlightService
    from services.campaign_contact_cache_service import CampaignContactCacheService
    from services.identity_resolver import ContactIdentityResolver
    from services.message_cache_service import MessageCacheService
    from services.thread_store import create_thread_store

    registry = ServiceRegistry()

    # Base services (no dependencies)
    registry.register('cache_settings', cache_settings)
    registry.register('redis', redis_client)
    registry.register_factory('db_session', lambda: db.session)

    # Repositories
    registry.register_factory(
        'message_repository',
        lambda db_session: MessageRepository(session=db_session),
        dependencies=['db_session']
    )
    registry.register_factory(
        'campaign_contact_repository',
        lambda db_session: CampaignContactRepository(session=db_session),
        dependencies=['db_session']
    )

    # Cache-backed services
    registry.register_factory(
        'thread_store',
        lambda redis, cache_settings: create_thread_store(redis, cache_settings),
        dependencies=['redis', 'cache_settings']
    )
    registry.register_factory(
        'campaign_contact_cache',
        lambda campaign_contact_repository, message_repository, redis, cache_settings: CampaignContactCacheService(
            campaign_contact_repository=campaign_contact_repository,
            message_repository=message_repository,
            redis_client=redis,
            settings=cache_settings
        ),
        dependencies=['campaign_contact_repository', 'message_repository', 'redis', 'cache_settings']
    )
    registry.register_factory(
        'in_flight',
        lambda redis, cache_settings: AssignmentInFlightService(redis_client=redis, settings=cache_settings),
        dependencies=['redis', 'cache_settings']
    )
    registry.register_factory(
        'identity_resolver',
        lambda campaign_contact_cache: ContactIdentityResolver(campaign_contact_cache),
        dependencies=['campaign_contact_cache']
    )
    registry.register_factory(
        'message_cache',
        lambda message_repository, thread_store, identity_resolver, campaign_contact_cache, in_flight: MessageCacheService(
            message_repository=message_repository,
            thread_store=thread_store,
            identity_resolver=identity_resolver,
            campaign_contact_cache=campaign_contact_cache,
            in_flight_service=in_flight
        ),
        dependencies=['message_repository', 'thread_store', 'identity_resolver',
                      'campaign_contact_cache', 'in_flight']
    )

    return registry


if __name__ == '__main__':
    app = create_app()
    app.run(debug=True)
