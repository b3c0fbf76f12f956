from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional

from socialnet.auth import get_current_user
from socialnet.database import get_db
from socialnet.dependencies import get_identity, get_responses
from socialnet.middleware.rate_limit import rate_limit_api_write
from socialnet.services.identity import IdentityResolver
from socialnet.services.presentation import Responses
from socialnet import schemas, crud

router = APIRouter(prefix="/quizzes", tags=["quizzes"])


@router.get("", response_model=List[schemas.QuizResponse])
async def get_quizzes(
    author: Optional[str] = Query(None, description="Only quizzes written by this username"),
    db: Session = Depends(get_db),
    identity: IdentityResolver = Depends(get_identity),
    responses: Responses = Depends(get_responses),
):
    if author:
        quizzes = crud.quiz.get_quizzes_by_author(db, identity.resolve(db, author))
    else:
        quizzes = crud.quiz.get_quizzes(db)
    return responses.quizzes(db, quizzes)


@router.post("", response_model=schemas.QuizSavedResponse)
@rate_limit_api_write
async def create_quiz(
    request: Request,
    quiz: schemas.QuizCreate,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    responses: Responses = Depends(get_responses),
):
    """Create a quiz. ``tags`` and ``options`` may be comma separated strings."""
    db_quiz = crud.quiz.create_quiz(db, current_user.id, quiz.question, quiz.tags, quiz.options, quiz.answer)
    return schemas.QuizSavedResponse(msg="Quiz successfully created!", quiz=responses.quiz(db, db_quiz))


@router.patch("/{quiz_id}", response_model=schemas.QuizSavedResponse)
async def update_quiz(
    quiz_id: str,
    update: schemas.QuizUpdate,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    responses: Responses = Depends(get_responses),
):
    db_quiz = crud.quiz.assert_author_is_user(db, quiz_id, current_user.id)
    db_quiz = crud.quiz.update_quiz(db, db_quiz, update.question, update.tags, update.options, update.answer)
    return schemas.QuizSavedResponse(msg="Quiz successfully updated!", quiz=responses.quiz(db, db_quiz))


@router.delete("/{quiz_id}", response_model=schemas.MessageResponse)
async def delete_quiz(
    quiz_id: str,
    current_user: schemas.CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    db_quiz = crud.quiz.assert_author_is_user(db, quiz_id, current_user.id)
    crud.quiz.delete_quiz(db, db_quiz)
    return schemas.MessageResponse(msg="Deleted quiz successfully!")
