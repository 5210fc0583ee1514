"""Domain records and constants shared by stores, workflows and routes.

Rows are mapped into these dataclasses by db_stores.py. ``to_dict`` emits the
camelCase shape the mobile client has always consumed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

ROLES = ("student", "tutor", "teacher", "parent")
GRADES = ("6", "7", "8", "9", "10", "11")

QUESTION_STATUSES = ("unanswered", "answered")
NOTIFICATION_TYPES = ("answer", "upvote", "resource", "achievement", "kudos")
TASK_PRIORITIES = ("low", "medium", "high")
FILE_TYPES = ("pdf", "image", "other")

RATING_VALUES = (5, 10, 15, 20, 25)


@dataclass
class UserProfile:
    id: int
    display_name: str
    email: str
    role: str = "student"
    grade: Optional[str] = None
    subject: Optional[str] = None
    student_email: Optional[str] = None
    points: int = 0
    registration_year: Optional[int] = None
    profile_image: str = ""
    created_at: str = ""

    @property
    def is_learner(self) -> bool:
        return self.role in ("student", "tutor")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "displayName": self.display_name,
            "email": self.email,
            "role": self.role,
            "grade": self.grade,
            "subject": self.subject,
            "studentEmail": self.student_email,
            "points": self.points if self.is_learner else None,
            "profileImage": self.profile_image,
            "createdAt": self.created_at,
        }


@dataclass
class Answer:
    id: int
    question_id: int
    text: str
    answered_by: Optional[int]
    answered_by_name: str = ""
    image_url: str = ""
    upvotes: int = 0
    is_accepted: bool = False
    rating: Optional[int] = None
    rated_by: Optional[int] = None
    created_at: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "answeredBy": self.answered_by,
            "answeredByName": self.answered_by_name,
            "imageUrl": self.image_url,
            "upvotes": self.upvotes,
            "isAccepted": self.is_accepted,
            "rating": self.rating,
            "ratedBy": self.rated_by,
            "createdAt": self.created_at,
        }


@dataclass
class Question:
    id: int
    title: str
    description: str
    subject: str
    grade: str
    asked_by: Optional[int]
    asked_by_name: str = ""
    topic: str = ""
    image_url: str = ""
    upvotes: int = 0
    status: str = "unanswered"
    created_at: str = ""
    answers: list[Answer] = field(default_factory=list)

    @property
    def is_answered(self) -> bool:
        return self.status == "answered"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "subject": self.subject,
            "topic": self.topic,
            "classroom": self.grade,
            "grade": self.grade,
            "askedBy": self.asked_by,
            "askedByName": self.asked_by_name,
            "imageUrl": self.image_url,
            "upvotes": self.upvotes,
            "status": self.status,
            "isAnswered": self.is_answered,
            "createdAt": self.created_at,
            "answers": [a.to_dict() for a in self.answers],
        }


@dataclass
class Resource:
    id: int
    title: str
    subject: str
    grade: str
    description: str = ""
    file_url: str = ""
    file_name: str = ""
    file_type: str = "other"
    topic: str = ""
    uploaded_by: Optional[int] = None
    uploaded_by_name: str = ""
    created_at: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "fileUrl": self.file_url,
            "fileName": self.file_name,
            "fileType": self.file_type,
            "subject": self.subject,
            "topic": self.topic,
            "classroom": self.grade,
            "grade": self.grade,
            "uploadedBy": self.uploaded_by,
            "uploadedByName": self.uploaded_by_name,
            "createdAt": self.created_at,
        }


@dataclass
class Notification:
    id: int
    user_id: int
    type: str
    title: str
    message: str = ""
    question_id: Optional[int] = None
    read: bool = False
    created_at: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "type": self.type,
            "title": self.title,
            "message": self.message,
            "questionId": self.question_id,
            "read": self.read,
            "createdAt": self.created_at,
        }


@dataclass
class StudyTask:
    id: int
    user_id: int
    title: str
    due_date: str
    description: str = ""
    subject: str = "General"
    priority: str = "medium"
    estimated_time: int = 30
    completed: bool = False
    created_at: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "subject": self.subject,
            "priority": self.priority,
            "dueDate": self.due_date,
            "estimatedTime": self.estimated_time,
            "completed": self.completed,
            "createdAt": self.created_at,
        }


@dataclass
class StudySession:
    id: int
    user_id: int
    subject: str
    date: str
    start_time: str
    description: str = ""
    duration: int = 60
    end_time: str = ""
    actual_duration: int = 0
    paused_time: int = 0
    pause_started_at: str = ""
    completed: bool = False
    created_at: str = ""

    @property
    def is_paused(self) -> bool:
        return bool(self.pause_started_at)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "subject": self.subject,
            "description": self.description,
            "duration": self.duration,
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "actualDuration": self.actual_duration,
            "pausedTime": self.paused_time,
            "isPaused": self.is_paused,
            "completed": self.completed,
        }


@dataclass
class Download:
    id: int
    user_id: int
    resource_id: int
    resource_title: str = ""
    file_name: str = ""
    downloaded_at: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "resourceId": self.resource_id,
            "resourceTitle": self.resource_title,
            "fileName": self.file_name,
            "downloadedAt": self.downloaded_at,
        }
