"""
Context Pack Constants
======================

Shared constants for task analysis, relevance scoring and budget allocation.
"""

# =============================================================================
# TOKEN ESTIMATION
# =============================================================================

# Approximate characters per token (no real tokenizer is used)
CHARS_PER_TOKEN = 4

DEFAULT_MAX_TOKENS = 50_000

# Tool responses larger than this are shrunk before being returned
# (80% of a 25k-token transport limit)
RESPONSE_TOKEN_LIMIT = 20_000

# =============================================================================
# TASK INTENT VOCABULARIES
# =============================================================================

# Checked in this order; the first group with a matching member wins
TASK_TYPE_KEYWORDS = {
    "feature": ["add", "implement", "create", "new feature", "feature", "build", "introduce", "support for"],
    "bug": ["fix", "bug", "error", "issue", "broken", "crash", "fails", "failing", "wrong", "not working"],
    "refactor": ["refactor", "restructure", "clean up", "cleanup", "simplify", "extract", "reorganize", "rename"],
    "investigation": ["investigate", "understand", "analyze", "analyse", "explore", "why", "how does", "find out"],
    "documentation": ["document", "docs", "readme", "comment", "jsdoc", "explain"],
}

ACTION_VERBS = [
    "add",
    "fix",
    "refactor",
    "implement",
    "create",
    "update",
    "remove",
    "delete",
    "improve",
    "optimize",
    "debug",
    "investigate",
    "document",
    "test",
    "migrate",
    "rename",
    "extract",
    "replace",
]

FRAMEWORK_CONCEPTS = [
    "component",
    "composable",
    "hook",
    "store",
    "state",
    "router",
    "route",
    "page",
    "layout",
    "middleware",
    "plugin",
    "context",
    "provider",
    "reducer",
    "props",
    "emit",
    "pinia",
    "vuex",
    "redux",
    "zustand",
    "screen",
    "navigation",
    "server",
]

DOMAIN_CONCEPTS = [
    "auth",
    "login",
    "logout",
    "signup",
    "register",
    "user",
    "account",
    "profile",
    "session",
    "token",
    "payment",
    "checkout",
    "cart",
    "order",
    "product",
    "invoice",
    "subscription",
    "notification",
    "search",
    "dashboard",
    "settings",
    "admin",
    "api",
    "form",
    "upload",
    "message",
    "chat",
]

STOP_WORDS = frozenset(
    {
        "about",
        "after",
        "also",
        "been",
        "before",
        "being",
        "both",
        "could",
        "does",
        "each",
        "from",
        "have",
        "here",
        "into",
        "just",
        "like",
        "make",
        "more",
        "most",
        "need",
        "needs",
        "only",
        "other",
        "please",
        "same",
        "should",
        "some",
        "such",
        "than",
        "that",
        "their",
        "them",
        "then",
        "there",
        "these",
        "they",
        "this",
        "those",
        "very",
        "want",
        "were",
        "what",
        "when",
        "where",
        "which",
        "while",
        "will",
        "with",
        "would",
        "your",
    }
)

# Directories a mentioned file path can be rooted at
SOURCE_ROOTS = [
    "src",
    "app",
    "components",
    "pages",
    "composables",
    "stores",
    "store",
    "hooks",
    "utils",
    "lib",
    "services",
    "api",
    "server",
    "layouts",
    "middleware",
    "plugins",
    "screens",
    "types",
    "views",
    "router",
]

# =============================================================================
# RELEVANCE WEIGHTS
# =============================================================================

WEIGHT_FOCUS_AREA = 50
WEIGHT_MENTIONED_FILE = 100
WEIGHT_PATH_KEYWORD = 15
WEIGHT_PATH_DOMAIN_CONCEPT = 20
WEIGHT_PATH_FRAMEWORK_CONCEPT = 10
WEIGHT_CONTENT_KEYWORD = 2
CAP_CONTENT_KEYWORD = 20
WEIGHT_CONTENT_DOMAIN_CONCEPT = 3
CAP_CONTENT_DOMAIN_CONCEPT = 30
WEIGHT_RELATED_TEST = 15

# =============================================================================
# BUDGET ALLOCATION
# =============================================================================

# Percent of max tokens per category:
# (architecture, primary_files, dependencies, tests, types)
STRATEGY_ALLOCATIONS = {
    "relevance": (10, 60, 15, 10, 5),
    "breadth": (15, 50, 20, 10, 5),
    "depth": (5, 70, 15, 5, 5),
}

INCLUDE_TYPES = ["relevant-files", "architecture", "dependencies", "tests", "types"]

DEFAULT_INCLUDE_TYPES = ["relevant-files", "architecture", "dependencies"]

# =============================================================================
# SELECTION
# =============================================================================

MAX_DEPENDENCY_FILES = 10

# A category stops accepting whole files once it is this full
SOFT_STOP_RATIO = 0.9

TRUNCATION_HEAD_RATIO = 0.6
TRUNCATION_TAIL_RATIO = 0.2
ELISION_MARKER = "\n\n/* ... content truncated to fit token budget ... */\n\n"

# Probed in order when resolving an extensionless import
RESOLVE_EXTENSIONS = [".ts", ".tsx", ".js", ".jsx", ".vue"]

NO_MATCH_SUGGESTION = (
    "No files matched the task description. "
    "Try broadening the task or adding focus areas."
)
