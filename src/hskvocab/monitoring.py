"""Monitoring configuration for the vocabulary trainer."""
from prometheus_client import Counter, Gauge, start_http_server

# Learning metrics
questions_answered = Counter(
    "hskvocab_questions_answered_total",
    "Total number of quiz questions answered",
    ["outcome"],
)

words_mastered = Counter(
    "hskvocab_words_mastered_total",
    "Total number of answers that moved a word to the mastered tier",
)

quiz_batches = Counter(
    "hskvocab_quiz_batches_total",
    "Total number of quiz batches assembled",
)

due_words = Gauge(
    "hskvocab_due_words",
    "Number of words due for review at the last check",
)

# Storage metrics
storage_writes = Counter(
    "hskvocab_storage_writes_total",
    "Total number of persisted state writes",
)

storage_errors = Counter(
    "hskvocab_storage_errors_total",
    "Total number of storage errors encountered",
    ["operation"],
)

# Side-effect metrics
pronunciation_errors = Counter(
    "hskvocab_pronunciation_errors_total",
    "Total number of failed pronunciation generations",
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
