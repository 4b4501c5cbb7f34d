"""Prompt generation for the AI debate partner"""

from practice_core.config import OPENING_LINE
from practice_core.types import DebateMessage, Persona


def create_opponent_prompt(persona: Persona, topic: str) -> str:
    """Create the system prompt for the in-character opponent

    Args:
        persona: Persona to impersonate
        topic: The debate topic

    Returns:
        System prompt string
    """
    personality = persona.description or f"a {persona.name.lower()} debater"
    return f"""You are an AI debater impersonating a {persona.name}.
Your personality is: "{personality}".
You are debating the topic: "{topic}".
Your stance is AGAINST what the user is arguing for.
Your responses must be concise, intelligent, and stay in character.
Directly challenge the user's points. Do not agree with the user.
Keep responses to a maximum of 3 sentences."""


def create_opening_line(persona: Persona, topic: str) -> str:
    """Fixed opening line used before the first user turn"""
    return OPENING_LINE.format(topic=topic, persona=persona.name.lower())


def format_transcript(messages: list[DebateMessage]) -> str:
    return "\n".join(f"{m.sender.upper()}: {m.content}" for m in messages)


def create_judge_prompt(messages: list[DebateMessage], topic: str, persona: Persona) -> str:
    """Create the prompt for the transcript judge

    Args:
        messages: Full debate transcript in order
        topic: The debate topic
        persona: Persona the AI played

    Returns:
        Judge prompt string
    """
    return f"""Analyze the following debate transcript on the topic "{topic}".
The user is arguing FOR the topic.
The AI is arguing AGAINST the topic, roleplaying as "{persona.name}: {persona.description}".

Transcript:
{format_transcript(messages)}

Score the user and the AI from 0 to 100, give a brief justification for the scores
(assessing argument quality, consistency, and persuasiveness), and declare a winner.
The user wins if their score is higher, the AI wins if its score is higher.
If scores are equal, it's a draw.

Answer with a JSON object only:
{{"user_score": <0-100>, "ai_score": <0-100>, "justification": "<text>", "winner": "user" | "ai" | "draw"}}"""


JUDGE_SYSTEM_PROMPT = """You are an impartial debate judge.
You reward clear reasoning, evidence and direct engagement with the opponent's points.
You always answer with valid JSON and nothing else."""
