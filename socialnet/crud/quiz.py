from typing import Optional
from sqlalchemy.orm import Session
from socialnet.errors import QuizAlreadyExistsError, QuizAuthorNotMatchError, QuizNotFoundError
from socialnet.models.quiz import Quiz


def get_quiz(db: Session, quiz_id: str) -> Optional[Quiz]:
    return db.query(Quiz).filter(Quiz.id == quiz_id).first()


def get_quizzes(db: Session) -> list[Quiz]:
    return db.query(Quiz).order_by(Quiz.created_at.desc(), Quiz.id).all()


def get_quizzes_by_author(db: Session, author_id: str) -> list[Quiz]:
    return db.query(Quiz).filter(Quiz.author_id == author_id).order_by(Quiz.created_at.desc(), Quiz.id).all()


def create_quiz(db: Session, author_id: str, question: str, tags: list[str], options: list[str], answer: str) -> Quiz:
    """Create a quiz. Questions are assumed to be unique."""
    if db.query(Quiz).filter(Quiz.question == question).first() is not None:
        raise QuizAlreadyExistsError(question)

    quiz = Quiz(author_id=author_id, question=question, tags=tags, options=options, answer=answer)
    db.add(quiz)
    db.commit()
    db.refresh(quiz)
    return quiz


def update_quiz(db: Session, quiz: Quiz, question: Optional[str] = None, tags: Optional[list[str]] = None,
                options: Optional[list[str]] = None, answer: Optional[str] = None) -> Quiz:
    """Update only the fields that were provided."""
    if question is not None and question != quiz.question:
        clash = db.query(Quiz).filter(Quiz.question == question, Quiz.id != quiz.id).first()
        if clash is not None:
            raise QuizAlreadyExistsError(question)
        quiz.question = question
    if tags is not None:
        quiz.tags = tags
    if options is not None:
        quiz.options = options
    if answer is not None:
        quiz.answer = answer

    db.commit()
    db.refresh(quiz)
    return quiz


def delete_quiz(db: Session, quiz: Quiz) -> None:
    db.delete(quiz)
    db.commit()


def assert_author_is_user(db: Session, quiz_id: str, user_id: str) -> Quiz:
    """Return the quiz if ``user_id`` wrote it, otherwise raise."""
    quiz = get_quiz(db, quiz_id)
    if quiz is None:
        raise QuizNotFoundError(quiz_id)
    if quiz.author_id != user_id:
        raise QuizAuthorNotMatchError(user_id, quiz_id)
    return quiz
