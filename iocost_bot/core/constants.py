"""
Constants
Centralised storage for storage layout, naming rules, and trusted origins.
"""
DATABASE_DIR = "database"
RESULT_PREFIX = "result-"
RESULT_SUFFIX = ".json.gz"
RESULT_GLOB = f"{RESULT_PREFIX}*{RESULT_SUFFIX}"
MERGED_FILENAME = "merged-results.json.gz"
BRANCH_PREFIX = "iocost-bot/"

DEFAULT_ALLOWED_PREFIXES = (
    "https://github.com/kov/iocost-benchmarks/files/",
    "https://iocost-submit.s3.eu-west-1.amazonaws.com/",
)

BENCH_RELATIVE_PATH = "resctl-demo/target/release/resctl-bench"
