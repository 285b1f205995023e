import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.errors import AlreadyExists, ServiceFailure
from app.models import (
    Feedback,
    FeedbackEvaluation,
    GetFeedbackByInterviewIdParams,
    GetLatestInterviewsParams,
    Interview,
)
from app.services.storage_service import StorageService

logger = logging.getLogger(__name__)


def _id_query(document_id: str) -> dict:
    # Documents written elsewhere get a default ObjectId _id
    if ObjectId.is_valid(document_id):
        return {'_id': {'$in': [document_id, ObjectId(document_id)]}}
    return {'_id': document_id}


class InterviewService:
    """Reads interviews and reads/writes feedback documents."""

    def __init__(self, storage: StorageService):
        self.storage = storage

    def get_interviews_by_user_id(self, user_id: str) -> List[Interview]:
        try:
            cursor = self.storage.interviews.find({'userId': user_id}).sort('createdAt', DESCENDING)
            return [Interview.from_document(doc) for doc in cursor]
        except PyMongoError as e:
            raise ServiceFailure(f"Failed to load interviews: {e}") from e

    def get_latest_interviews(self, params: GetLatestInterviewsParams) -> List[Interview]:
        """Finalized interviews created by users other than params.user_id."""
        query = {'finalized': True, 'userId': {'$ne': params.user_id}}
        try:
            cursor = (
                self.storage.interviews.find(query)
                .sort('createdAt', DESCENDING)
                .limit(params.limit)
            )
            return [Interview.from_document(doc) for doc in cursor]
        except PyMongoError as e:
            raise ServiceFailure(f"Failed to load latest interviews: {e}") from e

    def get_interview_by_id(self, interview_id: str) -> Optional[Interview]:
        try:
            doc = self.storage.interviews.find_one(_id_query(interview_id))
        except PyMongoError as e:
            raise ServiceFailure(f"Failed to load interview: {e}") from e

        if doc is None:
            return None
        return Interview.from_document(doc)

    def get_feedback_by_interview_id(self, params: GetFeedbackByInterviewIdParams) -> Optional[Feedback]:
        query = {'interviewId': params.interview_id, 'userId': params.user_id}
        try:
            docs = list(self.storage.feedback.find(query).limit(1))
        except PyMongoError as e:
            raise ServiceFailure(f"Failed to load feedback: {e}") from e

        if not docs:
            return None
        return Feedback.from_document(docs[0])

    def create_feedback_record(self, interview_id: str, user_id: str, evaluation: FeedbackEvaluation) -> str:
        feedback_id = str(uuid.uuid4())
        feedback_doc = {
            '_id': feedback_id,
            'interviewId': interview_id,
            'userId': user_id,
            'totalScore': evaluation.total_score,
            'categoryScores': evaluation.category_score_map(),
            'strengths': evaluation.strengths,
            'areasForImprovement': evaluation.areas_for_improvement,
            'finalAssessment': evaluation.final_assessment,
            'createdAt': datetime.now(timezone.utc).isoformat(),
        }

        try:
            self.storage.feedback.insert_one(feedback_doc)
        except DuplicateKeyError as e:
            raise AlreadyExists(
                f"Feedback already exists for interview {interview_id} and user {user_id}"
            ) from e
        except PyMongoError as e:
            raise ServiceFailure(f"Failed to save feedback: {e}") from e

        logger.info("Saved feedback %s for interview %s", feedback_id, interview_id)
        return feedback_id
