"""Call transcription collaborator (stubbed)."""

import logging

logger = logging.getLogger(__name__)

STUB_TRANSCRIPT = (
    "[Transcript will be generated here]\n"
    "Salesperson: Hi, this is the OpenSmile team calling about your interest in dental treatment.\n"
    "Lead: Yes, I submitted a form last week.\n"
    "Salesperson: Great! I wanted to learn more about what you're looking for...\n"
)


def generate_transcript(audio_url: str) -> str:
    # Recording URLs are PII; log only that a transcription was requested.
    logger.info("ai.transcription_stub")
    return STUB_TRANSCRIPT
