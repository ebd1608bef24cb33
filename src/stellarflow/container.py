from dependency_injector import containers, providers

from stellarflow.config import Settings
from stellarflow.infra.http.rate_limited_client import RateLimitedClient
from stellarflow.infra.metadata.cache import MetadataCache
from stellarflow.infra.metadata.client import ContractMetadataClient
from stellarflow.parser.service import ReconstructionService


class Container(containers.DeclarativeContainer):
    settings = providers.Singleton(Settings)

    http_client = providers.Singleton(
        RateLimitedClient,
        rate_per_second=settings.provided.metadata_rate_per_second,
        timeout=settings.provided.http_timeout,
        bearer_token=settings.provided.metadata_api_key,
    )

    metadata_client = providers.Singleton(
        ContractMetadataClient,
        base_url=settings.provided.metadata_api_url,
        http_client=http_client,
    )

    # One cache per session/request
    metadata_cache = providers.Factory(
        MetadataCache,
        resolver=metadata_client,
        network=settings.provided.network,
    )

    reconstruction_service = providers.Factory(
        ReconstructionService,
        cache=metadata_cache,
        path_payment_lookahead=settings.provided.path_payment_lookahead,
        include_mint_credit=settings.provided.include_mint_credit,
        default_decimals=settings.provided.default_token_decimals,
        include_token_events=settings.provided.include_token_events,
    )
