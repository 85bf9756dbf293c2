# app/routers/progress.py
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.models.user import User
from app.schemas.progress import (
    ExamSubmitRequest,
    SelfPacedProgressResponse,
    VideoCompleteRequest,
)
from app.services.progress import ProgressService

router = APIRouter(prefix="/progress", tags=["Progress"])


@router.post("/self-paced/videos", response_model=SelfPacedProgressResponse)
def complete_video(
    data: VideoCompleteRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    return ProgressService(db).complete_video(current_user, data)


@router.post("/self-paced/exams", response_model=SelfPacedProgressResponse)
def submit_exam(
    data: ExamSubmitRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Session = Depends(get_db),
):
    return ProgressService(db).submit_exam(current_user, data)
