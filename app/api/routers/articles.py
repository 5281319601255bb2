"""
app/api/routers/articles.py

Article library and generated draft endpoints.
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from openai import OpenAIError
from sqlalchemy.orm import Session

from app.schemas.articles import (
    ArticleCreateRequest,
    ArticleImportRequest,
    ArticleImportResponse,
    ArticleListResponse,
    ArticleResponse,
    ArticleSummaryResponse,
    ArticleUpdateRequest,
    DraftGenerateRequest,
    DraftListResponse,
    DraftResponse,
    FavouriteToggleResponse,
)
from app.services.article_service import ArticleService, get_article_service
from app.services.draft_service import DraftService, get_draft_service
from db.repositories.article_repository import ArticleRepository
from db.repositories.draft_repository import DraftRepository
from db.repositories.errors import RecordNotFoundError
from db.session import get_db
from llm.retry import LLMRetryExhaustedError
from llm.validator import LLMOutputValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["articles"])


def _not_found(exc: RecordNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("/articles", response_model=ArticleListResponse)
def list_articles(
    search: str | None = Query(default=None, description="Match title, summary or text"),
    source: str | None = Query(default=None, description="Match source name"),
    favourites_only: bool = Query(default=False),
    date_from: datetime | None = Query(default=None, description="Imported at or after"),
    date_to: datetime | None = Query(default=None, description="Imported at or before"),
    limit: int = Query(default=24, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    article_service: ArticleService = Depends(get_article_service),
) -> ArticleListResponse:
    try:
        items, total = article_service.list_articles(
            db=db,
            search=search,
            source=source,
            favourites_only=favourites_only,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
            offset=offset,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ArticleListResponse(
        items=[ArticleSummaryResponse.model_validate(item) for item in items],
        total=total,
    )


@router.get("/articles/{article_id}", response_model=ArticleResponse)
def get_article(article_id: int, db: Session = Depends(get_db)) -> ArticleResponse:
    article = ArticleRepository(db).get(article_id)
    if article is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Article not found: {article_id}",
        )
    return ArticleResponse.model_validate(article)


@router.post("/articles", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
def create_article(body: ArticleCreateRequest, db: Session = Depends(get_db)) -> ArticleResponse:
    try:
        article = ArticleRepository(db).create(**body.model_dump())
        db.commit()
    except Exception:
        db.rollback()
        raise
    return ArticleResponse.model_validate(article)


@router.post(
    "/articles/import-text",
    response_model=ArticleImportResponse,
    status_code=status.HTTP_201_CREATED,
)
def import_articles_from_text(
    body: ArticleImportRequest,
    db: Session = Depends(get_db),
    article_service: ArticleService = Depends(get_article_service),
) -> ArticleImportResponse:
    try:
        articles = article_service.import_from_text(db=db, raw_text=body.raw_text)
    except (LLMOutputValidationError, LLMRetryExhaustedError, OpenAIError) as exc:
        logger.warning("Article import from text failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to extract articles from text.",
        ) from exc
    return ArticleImportResponse(
        count=len(articles),
        articles=[ArticleSummaryResponse.model_validate(article) for article in articles],
    )


@router.patch("/articles/{article_id}", response_model=ArticleResponse)
def update_article(
    article_id: int,
    body: ArticleUpdateRequest,
    db: Session = Depends(get_db),
    article_service: ArticleService = Depends(get_article_service),
) -> ArticleResponse:
    try:
        article = article_service.update(
            db=db,
            article_id=article_id,
            fields=body.model_dump(exclude_unset=True),
        )
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ArticleResponse.model_validate(article)


@router.delete("/articles/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_article(article_id: int, db: Session = Depends(get_db)) -> None:
    try:
        ArticleRepository(db).delete(article_id)
        db.commit()
    except RecordNotFoundError as exc:
        db.rollback()
        raise _not_found(exc) from exc


@router.post("/articles/{article_id}/favourite", response_model=FavouriteToggleResponse)
def toggle_favourite(article_id: int, db: Session = Depends(get_db)) -> FavouriteToggleResponse:
    try:
        is_favourite = ArticleRepository(db).toggle_favourite(article_id)
        db.commit()
    except RecordNotFoundError as exc:
        db.rollback()
        raise _not_found(exc) from exc
    return FavouriteToggleResponse(id=article_id, is_favourite=is_favourite)


@router.get("/articles/{article_id}/drafts", response_model=DraftListResponse)
def list_drafts(article_id: int, db: Session = Depends(get_db)) -> DraftListResponse:
    rows = DraftRepository(db).list_by_article(article_id)
    return DraftListResponse(drafts=[DraftResponse.model_validate(row) for row in rows])


@router.post(
    "/articles/{article_id}/drafts",
    response_model=DraftResponse,
    status_code=status.HTTP_201_CREATED,
)
def generate_draft(
    article_id: int,
    body: DraftGenerateRequest,
    db: Session = Depends(get_db),
    draft_service: DraftService = Depends(get_draft_service),
) -> DraftResponse:
    try:
        draft = draft_service.generate(
            db=db,
            article_id=article_id,
            format=body.format,
            custom_angle=body.custom_angle,
        )
    except RecordNotFoundError as exc:
        raise _not_found(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except (LLMOutputValidationError, LLMRetryExhaustedError, OpenAIError) as exc:
        logger.warning("Draft generation failed article_id=%s format=%s: %s", article_id, body.format, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Draft generation failed: the model returned unusable output.",
        ) from exc
    return DraftResponse.model_validate(draft)


@router.delete("/drafts/{draft_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_draft(draft_id: int, db: Session = Depends(get_db)) -> None:
    try:
        DraftRepository(db).delete(draft_id)
        db.commit()
    except RecordNotFoundError as exc:
        db.rollback()
        raise _not_found(exc) from exc
