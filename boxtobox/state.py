"""Composition root: the services shared by every request.

build_services() creates one instance of each collaborator. main.py stores
the result on app.state during lifespan startup and routers fetch it with
the get_services dependency. Tests build their own AppServices with fakes.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from boxtobox.board import BoardGenerator, BoardPrecomputer, CellQuery, GenerationGuard
from boxtobox.config import Settings, get_settings
from boxtobox.matching import CriterionMatcher, EntityResolver, LocalAchievementIndex
from boxtobox.wikidata import WikidataClient


@dataclass
class AppServices:
    client: WikidataClient
    resolver: EntityResolver
    matcher: CriterionMatcher
    local_index: LocalAchievementIndex
    precomputer: BoardPrecomputer
    generator: BoardGenerator
    guard: GenerationGuard
    settings: Settings


def build_services(
    settings: Optional[Settings] = None,
    client: Optional[WikidataClient] = None,
    local_index: Optional[LocalAchievementIndex] = None,
) -> AppServices:
    settings = settings or get_settings()
    client = client or WikidataClient(settings)
    local_index = local_index or LocalAchievementIndex(settings.PLAYERS_DB_PATH)

    resolver = EntityResolver(client)
    matcher = CriterionMatcher(client, resolver)
    cell_query = CellQuery(matcher, local_index)

    return AppServices(
        client=client,
        resolver=resolver,
        matcher=matcher,
        local_index=local_index,
        precomputer=BoardPrecomputer(matcher, cell_query),
        generator=BoardGenerator(resolver, cell_query),
        guard=GenerationGuard(),
        settings=settings,
    )


def get_services(request: Request) -> AppServices:
    """FastAPI dependency returning the services built at startup."""
    return request.app.state.services
