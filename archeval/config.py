# archeval/config.py
"""
Configuration for the ArchEval assessment service.

Runtime knobs only. The question tables, weights and scoring threshold
live in archeval/engine/questions.py and are not configurable.
"""

import os


# ========== LLM CONFIGURATION ==========

# Primary provider
GEMINI_MODEL = "gemini-flash-latest"

# Fallback provider
OPENAI_MODEL = "gpt-4o-mini"

# Narrative generation
NARRATIVE_TEMPERATURE = 0.7  # Some variety in wording, same facts
NARRATIVE_MAX_TOKENS = 600

# Random scenario generation
SCENARIO_TEMPERATURE = 1.0  # Want different scenarios each time
SCENARIO_MAX_TOKENS = 1200


# ========== NARRATIVE FALLBACKS ==========

# Shown while the narrative call is still pending
PENDING_EXPLANATION = "Analyzing detailed constraints..."

MISSING_KEY_EXPLANATION = "API Key is missing. Unable to generate AI explanation."
FAILED_EXPLANATION = "Unable to generate AI explanation due to a network or API error."
EMPTY_EXPLANATION = "Analysis generated, but no text returned."


# ========== SUBMISSION STORE ==========

# Supabase project (PostgREST). Both unset -> store disabled, mock data shown.
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")
SUPABASE_TABLE = "submissions"

STORE_TIMEOUT_SECONDS = 10


# ========== ADMIN ==========

# Shared password for the review board view. Unset -> admin view disabled.
ADMIN_PASSWORD_ENV = "ARCHEVAL_ADMIN_PASSWORD"


# ========== API / UI ==========

API_VERSION = "1.0.0"

# Streamlit front-end target
API_BASE = os.getenv("ARCHEVAL_API_BASE", "http://127.0.0.1:8000")

LOG_DIR = "logs"
STORAGE_DIR = "storage"
METRICS_PATH = os.path.join(STORAGE_DIR, "metrics.json")

# Latency samples kept for the p95, oldest dropped first
METRICS_LATENCY_WINDOW = 1000


# ========== DESIGN TRADE-OFFS (DOCUMENTED) ==========

"""
TRADE-OFF DECISIONS:

1. Narrative after decision:
   - The engine result is returned immediately
   - The narrative is attached by a background task
   - Clients poll GET /assessments/{id} for the final text

2. Best-effort persistence:
   - A failed save is logged and ignored
   - Limitation: no retry, history may miss submissions

3. In-memory submission registry:
   - Trade-off: simple single-instance deployment
   - Limitation: history without a store is lost on restart
"""
