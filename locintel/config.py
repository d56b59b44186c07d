# locintel/config.py
from dotenv import load_dotenv
import os

load_dotenv()

# Remote cache (Upstash-style REST Redis)
UPSTASH_REDIS_REST_URL = os.getenv("UPSTASH_REDIS_REST_URL")
UPSTASH_REDIS_REST_TOKEN = os.getenv("UPSTASH_REDIS_REST_TOKEN")
# Unset means the transport's own default timeout applies
CACHE_REQUEST_TIMEOUT_SECONDS = (
    float(os.getenv("CACHE_REQUEST_TIMEOUT_SECONDS"))
    if os.getenv("CACHE_REQUEST_TIMEOUT_SECONDS")
    else None
)

# Runtime parameters
CACHE_TTL_SECONDS = 3600
CONCURRENCY = 100
POPULAR_REVIEW_THRESHOLD = 500
MIN_MATCH_SCORE = 60
FUZZY_THRESHOLD = 80
BATCH_SIZE = 15
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Brand used by the batch runner
BRAND_ID = os.getenv("BRAND_ID", "brand-local")
BRAND_NAME = os.getenv("BRAND_NAME", "Local Brand")
BRAND_INDUSTRY = os.getenv("BRAND_INDUSTRY", "cafe")
BRAND_WEIGHT_OVERRIDES = os.getenv("BRAND_WEIGHT_OVERRIDES")

# File names
INPUT_CSV = "properties.csv"
OUTPUT_CSV = "brand_matches.csv"
