"""Fixed constants shared across modules."""

# Placeholders used when the judge leaves a field out
DEFAULT_REASONS = ("No reasons provided",)
DEFAULT_EXPLANATION = "No explanation provided"

# Explanations attached to locally synthesized verdicts
HIGH_CONFIDENCE_FALLBACK_EXPLANATION = (
    "Semantic judge unavailable; texts are near-identical on surface comparison"
)
DEGRADED_FALLBACK_EXPLANATION = (
    "Semantic judge unavailable; score estimated from surface text and shared terms"
)

# Header labels recognised as the question column in uploaded spreadsheets
QUESTION_COLUMN_NAMES = ("question", "question text", "q", "text")

ALLOWED_UPLOAD_SUFFIXES = (".xlsx", ".xlsm")
CLEANED_SHEET_TITLE = "Unique Questions"

STOPWORDS = frozenset(
    {
        "a", "about", "an", "and", "are", "as", "at", "be", "by", "can", "could",
        "do", "does", "did", "for", "from", "has", "have", "how", "i", "if", "in",
        "into", "is", "it", "its", "me", "my", "of", "on", "or", "our", "should",
        "so", "that", "the", "their", "them", "there", "these", "they", "this",
        "those", "to", "was", "we", "were", "what", "when", "where", "which",
        "who", "whom", "why", "will", "with", "would", "you", "your",
    }
)
