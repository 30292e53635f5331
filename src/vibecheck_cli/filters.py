"""Path policy: which directories to walk, which files to analyze, and as what language.

Directory pruning and the file analyzability filter share one table so the
two never drift apart.
"""

from __future__ import annotations

import re

# --- Exclusion table ---

# Directory names never descended into.
SKIP_DIR_NAMES = {
    # Dependencies and build outputs
    "node_modules", "dist", "build", ".next", ".nuxt", "coverage", ".nyc_output",
    "public", "static", "assets", "vendor", "target", "__pycache__", "venv", "Pods",
    # Framework generated
    ".generated", ".gen",
    # Version control and IDE
    ".git", ".svn", ".hg", ".vscode", ".idea", ".vs",
    # Config
    ".husky", ".github", ".gitlab",
    # Temp
    "tmp", "temp", ".cache", ".temp",
}

# Path fragments that prune a directory wherever they occur.
SKIP_PATH_FRAGMENTS = (
    "/node_modules/",
    "/components/ui/",
    "/.",
    "/dist/",
    "/build/",
)

ANALYZABLE_EXTENSIONS = {
    ".js", ".jsx", ".ts", ".tsx", ".py", ".java", ".cpp", ".cc", ".cxx", ".c++",
    ".cs", ".go", ".rs", ".php", ".rb", ".swift", ".kt", ".scala", ".vue", ".svelte",
    ".html", ".css", ".scss", ".sass", ".md", ".mdx", ".txt", ".json", ".yaml", ".yml",
    ".xml", ".sh", ".bash", ".zsh", ".fish", ".ps1", ".bat", ".cmd", ".sql", ".r",
    ".dart", ".lua", ".perl", ".pl", ".clj", ".cljs", ".elm", ".ex", ".exs", ".fs",
    ".fsx", ".fsi", ".ml", ".mli", ".hs", ".lhs", ".jl", ".nim", ".cr", ".d", ".pas",
    ".pp", ".dpr", ".dfm", ".inc", ".asm", ".s", ".dockerfile", ".cmake",
    ".mk", ".makefile", ".gradle", ".sbt", ".pom", ".csproj", ".fsproj", ".vbproj",
    ".vcxproj", ".pbxproj", ".xcconfig", ".plist", ".ini", ".cfg", ".conf", ".config",
    ".toml", ".lock", ".env", ".gitignore", ".gitattributes", ".editorconfig",
}

EXCLUDED_FILE_PATTERNS = [
    re.compile(p)
    for p in (
        # Framework UI components (shadcn/ui etc.)
        r"/components/ui/", r"/ui/", r"\.shadcn/",
        # Build and dependency folders
        r"node_modules/", r"dist/", r"build/", r"\.next/", r"\.nuxt/", r"coverage/",
        # Generated files
        r"\.generated\.", r"\.gen\.", r"\.d\.ts$", r"types\.ts$",
        # Tooling config, mostly boilerplate
        r"tailwind\.config\.", r"vite\.config\.", r"webpack\.config\.", r"next\.config\.",
        r"nuxt\.config\.", r"rollup\.config\.", r"babel\.config\.", r"jest\.config\.",
        r"vitest\.config\.", r"postcss\.config\.", r"eslint\.config\.", r"prettier\.config\.",
        # Package manifests and lockfiles
        r"package\.json$", r"package-lock\.json$", r"yarn\.lock$", r"pnpm-lock\.yaml$",
        r"bun\.lockb$",
        # Entry-point boilerplate
        r"/(main|index)\.(js|ts|jsx|tsx)$", r"App\.(js|ts|jsx|tsx)$",
        # Test files and fixtures
        r"\.(test|spec)\.(js|ts|jsx|tsx)$", r"__tests__/", r"\.test/",
        # Hidden and IDE folders
        r"/\.", r"\.git/", r"\.vscode/", r"\.idea/",
    )
]

# Extension -> language tag handed to the line classifier
LANGUAGE_MAP = {
    ".js": "javascript", ".jsx": "jsx",
    ".ts": "typescript", ".tsx": "tsx",
    ".py": "python",
    ".java": "java",
    ".cpp": "cpp", ".cc": "cpp", ".cxx": "cpp", ".c++": "cpp",
    ".cs": "csharp",
    ".go": "go",
    ".rs": "rust",
    ".php": "php",
    ".rb": "ruby",
    ".swift": "swift",
    ".kt": "kotlin",
    ".scala": "scala",
    ".sh": "bash",
    ".sql": "sql",
    ".html": "html",
    ".css": "css", ".scss": "scss", ".sass": "sass",
    ".json": "json",
    ".yaml": "yaml", ".yml": "yaml",
    ".xml": "xml",
    ".md": "markdown",
}

_EXTENSION_RE = re.compile(r"\.[^.]*$")


def file_extension(path: str) -> str:
    """Lower-cased final ``.suffix`` of a path, or ``""``."""
    match = _EXTENSION_RE.search(path.lower())
    return match.group(0) if match else ""


def language_for_path(path: str) -> str:
    return LANGUAGE_MAP.get(file_extension(path), "text")


def should_skip_directory(path: str, name: str) -> bool:
    """True for dependency, build, VCS, IDE, generated-UI and hidden directories."""
    if name in SKIP_DIR_NAMES or name.startswith("."):
        return True
    wrapped = f"/{path.strip('/')}/"
    return any(fragment in wrapped for fragment in SKIP_PATH_FRAGMENTS)


def should_analyze_file(path: str) -> bool:
    """True if a file is worth sending to the line classifier."""
    if "node_modules/" in path:
        return False

    ext = file_extension(path)
    if not ext or ext not in ANALYZABLE_EXTENSIONS:
        return False

    return not any(pattern.search(path) for pattern in EXCLUDED_FILE_PATTERNS)
