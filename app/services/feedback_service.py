import logging
from typing import List

from app.models import CreateFeedbackParams, FeedbackResult, TranscriptMessage
from app.services.ai_service import AIService
from app.services.interview_service import InterviewService

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a professional interviewer analyzing a mock interview. "
    "Your task is to evaluate the candidate based on structured categories"
)

FEEDBACK_PROMPT = """You are an AI interviewer analyzing a mock interview. Your task is to evaluate the candidate based on structured categories. Be thorough and detailed in your analysis. Don't be lenient with the candidate. If there are mistakes or areas for improvement, point them out.
Transcript:
{transcript}

Please score the candidate from 0 to 100 in the following areas. Do not add categories other than the ones provided:
- Communication Skills: Clarity, articulation, structured responses.
- Technical Knowledge: Understanding of key concepts for the role.
- Problem-Solving: Ability to analyze problems and propose solutions.
- Cultural & Role Fit: Alignment with company values and job role.
- Confidence & Clarity: Confidence in responses, engagement, and clarity.
"""


def format_transcript(transcript: List[TranscriptMessage]) -> str:
    return "".join(f"- {message.role}: {message.content}\n" for message in transcript)


def build_feedback_prompt(transcript: List[TranscriptMessage]) -> str:
    return FEEDBACK_PROMPT.format(transcript=format_transcript(transcript))


class FeedbackService:
    def __init__(self, ai_service: AIService, interviews: InterviewService):
        self.ai_service = ai_service
        self.interviews = interviews

    def create_feedback(self, params: CreateFeedbackParams) -> FeedbackResult:
        try:
            evaluation = self.ai_service.generate_feedback(
                build_feedback_prompt(params.transcript),
                system=SYSTEM_PROMPT,
            )
            feedback_id = self.interviews.create_feedback_record(
                params.interview_id,
                params.user_id,
                evaluation,
            )
        except Exception:
            logger.exception("Error saving feedback for interview %s", params.interview_id)
            return FeedbackResult(success=False)

        return FeedbackResult(success=True, feedback_id=feedback_id)
