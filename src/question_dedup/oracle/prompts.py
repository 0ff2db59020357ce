"""Prompt templates for the semantic judge."""

JUDGE_SYSTEM = """You compare two questions and decide whether they ask the same thing.
Rules:
- Two questions are the same if a single answer fully answers both.
- Ignore differences in wording, casing, punctuation and word order.
- Questions about different entities, quantities or time periods are different.
- Respond with a single JSON object and nothing else."""

SIMILARITY_JUDGE_PROMPT = """Question A: {question_a}

Question B: {question_b}

Return a JSON object:
- "score": float between 0.0 (unrelated) and 1.0 (same question)
- "isSame": true if both questions ask the same thing, otherwise false
- "reasons": list of short strings explaining the decision
- "explanation": one sentence summary"""

SIMPLIFIED_JUDGE_PROMPT = """Do these two questions ask the same thing?

A: {question_a}
B: {question_b}

Reply with exactly this JSON and no other text:
{{"score": <number 0-1>, "isSame": <true|false>}}"""
