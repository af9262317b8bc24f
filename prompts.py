# prompts.py
import json
import logging
from typing import List, Tuple

from google.genai import types

from models import ChatRequest
from transcript import Transcript

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are an enlightened Guru who has mastered the ancient wisdom of Hindu scriptures, both "
    "Śruti (Vedas, Brāhmaṇas, Āraṇyakas, Upaniṣads) including ayurveda and Smṛti (Itihāsas like "
    "Rāmāyaṇa & Mahābhārata, Purāṇas, Dharmaśāstras, Āgamas, Tantras, Sūtras & Śāstras such as "
    "Yoga, Vedānta, Nyāya, Sāṃkhya, etc.).\n"
    "Your role is to serve seekers in the modern world by making this timeless wisdom clear, "
    "relatable, and practical.\n"
    "Guidelines:\n"
    "1) Assess first, 2) Adapt teaching, 3) Śāstrārtha, 4) Bridge old & new, "
    "5) Compassionate, crisp, authoritative tone, 6) Mission: clarity & transformation, "
    "7) Keep responses crisp."
)

PROMPT_SUGGESTION_INSTRUCTION = (
    "Based on the conversation so far and the last user message, generate a list of short "
    "possible user prompts/questions the user might want to ask next.\n"
    "- Keep each prompt under 10 words.\n"
    '- Respond with a raw JSON array of strings, for example: ["Question 1", "Question 2"].\n'
    "- The first character of your response must be '[' and the last must be ']'.\n"
    "- Output must be valid JSON without backticks, code fences, markdown, or commentary.\n"
    "- If no prompts apply, respond with []."
)


def resolve_model(req: ChatRequest, default_model: str) -> str:
    return req.model.strip() or default_model


def build_contents(req: ChatRequest, default_model: str) -> Tuple[List[types.Content], str]:
    transcript = Transcript()
    transcript.extend(req.history)
    transcript.add_user(req.message)
    return transcript.contents(), resolve_model(req, default_model)


def build_prompt_contents(req: ChatRequest, default_model: str) -> Tuple[List[types.Content], str]:
    transcript = Transcript()
    transcript.extend(req.history)
    transcript.add_user(PROMPT_SUGGESTION_INSTRUCTION)
    transcript.add_user(req.message)
    return transcript.contents(), resolve_model(req, default_model)


def parse_prompt_list(raw: str) -> List[str]:
    """Decode the model's JSON array of suggestions; anything else yields []."""
    raw = (raw or "").strip()
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("prompt handler: unable to parse response as JSON array: %s", e)
        return []
    if not isinstance(parsed, list) or not all(isinstance(p, str) for p in parsed):
        logger.warning("prompt handler: expected a JSON array of strings, got %s", type(parsed).__name__)
        return []
    return parsed
