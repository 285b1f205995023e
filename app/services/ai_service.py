from openai import OpenAI

from app.config import Settings
from app.errors import ServiceFailure
from app.models import FeedbackEvaluation


class AIService:
    def __init__(self, client: OpenAI, model: str = "gpt-4.1"):
        self.client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "AIService":
        return cls(OpenAI(api_key=settings.openai_api_key), model=settings.openai_model)

    def generate_feedback(self, prompt: str, system: str) -> FeedbackEvaluation:
        """
        Ask the model for a FeedbackEvaluation.
        Raises ServiceFailure on a refusal or an unparsed reply; transport and
        validation errors from the client propagate unchanged.
        """
        completion = self.client.chat.completions.parse(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            response_format=FeedbackEvaluation,
        )

        message = completion.choices[0].message
        if message.refusal:
            raise ServiceFailure(f"AI analysis refused: {message.refusal}")
        if message.parsed is None:
            raise ServiceFailure("AI analysis returned no structured output")

        return message.parsed
