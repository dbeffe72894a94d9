"""
Podcasts router for the catalog and its nested episodes.

Reading the catalog is public. Creating, updating and deleting podcasts
and episodes requires the host or admin role.

Responses carry the service envelope: not-found and validation
rejections come back with ``ok: false`` and a message.
"""

from fastapi import APIRouter, Depends

from podcast_api.models.common import CoreResponse
from podcast_api.models.users import User
from podcast_api.models.podcasts import (
    CreatePodcastInput, UpdatePodcastPayload, UpdatePodcastInput,
    EpisodeFields, EpisodeUpdateFields,
    CreateEpisodeInput, UpdateEpisodeInput, EpisodesSearchInput,
    PodcastsResponse, PodcastResponse, EpisodesResponse, EpisodeResponse,
    CreatedResponse
)
from podcast_api.services.podcasts_service import PodcastsService
from podcast_api.dependencies import get_podcasts_service, require_host

router = APIRouter(
    prefix="/podcasts",
    tags=["Podcasts"],
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        422: {"description": "Validation Error"}
    }
)


# ============================================================================
# PODCAST ENDPOINTS
# ============================================================================


@router.get("", response_model=PodcastsResponse, summary="List Podcasts")
async def get_all_podcasts(
    podcasts_service: PodcastsService = Depends(get_podcasts_service)
) -> PodcastsResponse:
    output = await podcasts_service.get_all_podcasts()
    return PodcastsResponse.model_validate(output, from_attributes=True)


@router.post("", response_model=CreatedResponse, summary="Create Podcast")
async def create_podcast(
    data: CreatePodcastInput,
    host: User = Depends(require_host),
    podcasts_service: PodcastsService = Depends(get_podcasts_service)
) -> CreatedResponse:
    output = await podcasts_service.create_podcast(data)
    return CreatedResponse.model_validate(output, from_attributes=True)


@router.get("/{podcast_id}", response_model=PodcastResponse, summary="Get Podcast")
async def get_podcast(
    podcast_id: int,
    podcasts_service: PodcastsService = Depends(get_podcasts_service)
) -> PodcastResponse:
    output = await podcasts_service.get_podcast(podcast_id)
    return PodcastResponse.model_validate(output, from_attributes=True)


@router.patch(
    "/{podcast_id}",
    response_model=CoreResponse,
    summary="Update Podcast",
    description="""
    Change the title, category and/or rating of a podcast.

    **Failure messages:**
    - "Podcast with id {id} not found"
    - "Rating must be between 1 and 5."
    """
)
async def update_podcast(
    podcast_id: int,
    payload: UpdatePodcastPayload,
    host: User = Depends(require_host),
    podcasts_service: PodcastsService = Depends(get_podcasts_service)
) -> CoreResponse:
    output = await podcasts_service.update_podcast(
        UpdatePodcastInput(id=podcast_id, payload=payload)
    )
    return CoreResponse.model_validate(output, from_attributes=True)


@router.delete("/{podcast_id}", response_model=CoreResponse, summary="Delete Podcast")
async def delete_podcast(
    podcast_id: int,
    host: User = Depends(require_host),
    podcasts_service: PodcastsService = Depends(get_podcasts_service)
) -> CoreResponse:
    output = await podcasts_service.delete_podcast(podcast_id)
    return CoreResponse.model_validate(output, from_attributes=True)


# ============================================================================
# EPISODE ENDPOINTS
# ============================================================================


@router.get("/{podcast_id}/episodes", response_model=EpisodesResponse, summary="List Episodes")
async def get_episodes(
    podcast_id: int,
    podcasts_service: PodcastsService = Depends(get_podcasts_service)
) -> EpisodesResponse:
    output = await podcasts_service.get_episodes(podcast_id)
    return EpisodesResponse.model_validate(output, from_attributes=True)


@router.post("/{podcast_id}/episodes", response_model=CreatedResponse, summary="Create Episode")
async def create_episode(
    podcast_id: int,
    data: EpisodeFields,
    host: User = Depends(require_host),
    podcasts_service: PodcastsService = Depends(get_podcasts_service)
) -> CreatedResponse:
    output = await podcasts_service.create_episode(
        CreateEpisodeInput(podcast_id=podcast_id, **data.model_dump())
    )
    return CreatedResponse.model_validate(output, from_attributes=True)


@router.get(
    "/{podcast_id}/episodes/{episode_id}",
    response_model=EpisodeResponse,
    summary="Get Episode",
    description="""
    Get one episode of a podcast.

    **Failure messages:**
    - "Podcast with id {podcast_id} not found"
    - "Episode with id {episode_id} not found in podcast with id {podcast_id}"
    """
)
async def get_episode(
    podcast_id: int,
    episode_id: int,
    podcasts_service: PodcastsService = Depends(get_podcasts_service)
) -> EpisodeResponse:
    output = await podcasts_service.get_episode(
        EpisodesSearchInput(podcast_id=podcast_id, episode_id=episode_id)
    )
    return EpisodeResponse.model_validate(output, from_attributes=True)


@router.patch(
    "/{podcast_id}/episodes/{episode_id}",
    response_model=CoreResponse,
    summary="Update Episode"
)
async def update_episode(
    podcast_id: int,
    episode_id: int,
    data: EpisodeUpdateFields,
    host: User = Depends(require_host),
    podcasts_service: PodcastsService = Depends(get_podcasts_service)
) -> CoreResponse:
    output = await podcasts_service.update_episode(
        UpdateEpisodeInput(
            podcast_id=podcast_id,
            episode_id=episode_id,
            **data.model_dump(exclude_none=True)
        )
    )
    return CoreResponse.model_validate(output, from_attributes=True)


@router.delete(
    "/{podcast_id}/episodes/{episode_id}",
    response_model=CoreResponse,
    summary="Delete Episode"
)
async def delete_episode(
    podcast_id: int,
    episode_id: int,
    host: User = Depends(require_host),
    podcasts_service: PodcastsService = Depends(get_podcasts_service)
) -> CoreResponse:
    output = await podcasts_service.delete_episode(
        EpisodesSearchInput(podcast_id=podcast_id, episode_id=episode_id)
    )
    return CoreResponse.model_validate(output, from_attributes=True)
