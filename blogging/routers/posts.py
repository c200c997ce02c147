from fastapi import APIRouter, Body, Depends, Response
from blogging.dependencies import get_post_service
from blogging.schemas import PostRequest, PostResponse
from blogging.services.post_service import PostService

router = APIRouter(prefix="/api/posts", tags=["posts"])

@router.post("", status_code=201, response_model=PostResponse)
async def create_post(
    data: PostRequest | None = Body(None),
    service: PostService = Depends(get_post_service),
):
    return await service.create_post(data)

@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    data: PostRequest | None = Body(None),
    service: PostService = Depends(get_post_service),
):
    return await service.update_post(post_id, data)

@router.delete("/{post_id}", status_code=204)
async def delete_post(post_id: int, service: PostService = Depends(get_post_service)):
    await service.delete_post(post_id)
    return Response(status_code=204)

@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, service: PostService = Depends(get_post_service)):
    return await service.get_post(post_id)

@router.get("", response_model=list[PostResponse])
async def search_posts(term: str = "", service: PostService = Depends(get_post_service)):
    return await service.search_posts(term)
