"""Configuration constants for deutschweg application."""

# Review scheduling
REVIEW_INTERVAL_HOURS = [0, 4, 8, 24, 72, 168]  # Indexed by repetition rank
FALLBACK_INTERVAL_HOURS = 336                    # Ranks past the table (two weeks)
KNOWN_RANK = 4                                   # Rank forced by "I know this"
KNOWN_INTERVAL_DAYS = 30

# Rank lost on a wrong answer
INCORRECT_RANK_PENALTY = 2

# Answer matching
TOKEN_OVERLAP_THRESHOLD = 0.5

# Persistence
REVIEW_STATE_NAMESPACE = 'deutschWegProgressV2'
SNAPSHOT_SENTINEL_KEY = 'initialized'

# Conjugation table order
PRONOUNS = ['ich', 'du', 'er/sie/es', 'wir', 'ihr', 'sie/Sie']
PERFECT_PERSONS = ['ich', 'du']
PERFECT_AUX_FORMS = {
    'haben': {'ich': 'habe', 'du': 'hast'},
    'sein': {'ich': 'bin', 'du': 'bist'},
}

GENDER_CHOICES = ['der', 'die', 'das']
VERB_TYPE_CHOICES = ['regular', 'irregular']
FLASHCARD_CHOICES = ['wrong', 'correct']

LEVELS = ['A1', 'A2']
