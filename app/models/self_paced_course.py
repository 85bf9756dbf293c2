# app/models/self_paced_course.py
from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text

from app.core.database import Base
from app.models.course_base import CourseColumnsMixin
from app.models.course_type import CourseType, ProgressStatus


class SelfPacedCourse(CourseColumnsMixin, Base):
    __tablename__ = "self_paced_courses"

    course_type = CourseType.SELF_PACED

    # Access window after payment
    access_days = Column(Integer, nullable=False, default=365)

    def progress_status(self, enrollment) -> str:
        """
        Course progress status derived from the enrollment's video progress:
        completed once every video is watched and every attached exam passed.
        """
        if not self.videos:
            return ProgressStatus.NOT_STARTED.value

        completed_videos = {p.video_id for p in enrollment.video_progress if p.video_completed}
        completed_exams = {p.video_id for p in enrollment.video_progress if p.exam_completed}

        all_videos_done = all(v.id in completed_videos for v in self.videos)
        all_exams_done = all(v.id in completed_exams for v in self.videos if v.has_exam)
        if all_videos_done and all_exams_done:
            return ProgressStatus.COMPLETED.value
        if completed_videos or completed_exams:
            return ProgressStatus.IN_PROGRESS.value
        return ProgressStatus.NOT_STARTED.value

    def progress_percentage(self, enrollment) -> int:
        if not self.videos:
            return 0
        completed = {p.video_id for p in enrollment.video_progress if p.video_completed}
        done = sum(1 for v in self.videos if v.id in completed)
        return round(done / len(self.videos) * 100)

    def is_certificate_eligible(self, enrollment) -> bool:
        return self.progress_status(enrollment) == ProgressStatus.COMPLETED.value

    def __repr__(self):
        return f"<SelfPacedCourse(id={self.id}, code='{self.course_code}', title='{self.title}')>"


class SelfPacedVideo(Base):
    __tablename__ = "self_paced_videos"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(
        Integer,
        ForeignKey("self_paced_courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    sequence = Column(Integer, nullable=False, default=0)
    duration_minutes = Column(Integer, nullable=True)
    has_exam = Column(Boolean, nullable=False, default=False)
    exam_passing_score = Column(Integer, nullable=False, default=70)

    def __repr__(self):
        return f"<SelfPacedVideo(id={self.id}, course_id={self.course_id}, title='{self.title}')>"
