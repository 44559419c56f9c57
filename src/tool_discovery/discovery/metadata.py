"""Static knowledge base for command line tools.

Curated descriptions, categories, usage examples and the error/task
pattern tables used by the matcher. These are fixed tables rather than
parsed ``--help`` output, which is too inconsistent across tools.
"""

from .types import CATEGORIES, MatchRule

# =========================================================================
# Categories
# =========================================================================

TOOL_CATEGORIES: dict[str, list[str]] = {
    "development": [
        "git",
        "gh",
        "npm",
        "yarn",
        "pnpm",
        "npx",
        "node",
        "python",
        "python3",
        "pip",
        "go",
        "gofmt",
        "cargo",
        "rustc",
        "make",
        "gdb",
        "strace",
    ],
    "data-processing": ["jq", "yq", "awk", "sed", "grep", "rg", "sort", "uniq"],
    "network": [
        "curl",
        "wget",
        "ping",
        "netstat",
        "ss",
        "traceroute",
        "ssh",
        "scp",
        "nc",
        "dig",
        "nslookup",
        "openssl",
    ],
    "system": [
        "ps",
        "top",
        "htop",
        "lsof",
        "find",
        "fd",
        "locate",
        "which",
        "whereis",
        "sudo",
        "chmod",
        "chown",
        "kill",
        "df",
        "du",
        "free",
    ],
    "archive": ["tar", "zip", "unzip", "gzip", "gunzip", "rsync"],
    "container": ["docker", "docker-compose", "podman", "kubectl", "helm"],
    "cloud": ["aws", "gcloud", "az", "terraform", "ansible"],
    "documentation": ["man", "tldr", "info"],
}

_CATEGORY_BY_TOOL: dict[str, str] = {
    tool: category for category, tools in TOOL_CATEGORIES.items() for tool in tools
}

# Probed on every registry build.
SEED_TOOLS: tuple[str, ...] = tuple(
    dict.fromkeys(tool for tools in TOOL_CATEGORIES.values() for tool in tools)
)

# Served when no build could complete.
FALLBACK_TOOLS: tuple[str, ...] = ("git", "npm", "jq", "curl", "docker")

# =========================================================================
# Descriptions
# =========================================================================

TOOL_DESCRIPTIONS: dict[str, str] = {
    # Development
    "git": "Version control system",
    "gh": "GitHub CLI",
    "npm": "Node.js package manager",
    "yarn": "Alternative Node.js package manager",
    "pnpm": "Disk-efficient Node.js package manager",
    "npx": "Run Node.js package binaries",
    "node": "JavaScript runtime",
    "python": "Python interpreter",
    "python3": "Python 3 interpreter",
    "pip": "Python package installer",
    "go": "Go toolchain",
    "gofmt": "Go source formatter",
    "cargo": "Rust package manager and build tool",
    "rustc": "Rust compiler",
    "make": "Build automation from Makefiles",
    "gdb": "GNU debugger",
    "strace": "Trace system calls and signals",
    # Data processing
    "jq": "JSON processor and formatter",
    "yq": "YAML processor",
    "awk": "Pattern scanning and text processing language",
    "sed": "Stream editor for filtering and transforming text",
    "grep": "Search text using patterns",
    "rg": "Fast recursive text search (ripgrep)",
    "sort": "Sort lines of text",
    "uniq": "Report or omit repeated lines",
    # Network
    "curl": "Data transfer utility",
    "wget": "Non-interactive network downloader",
    "ping": "Check host reachability",
    "netstat": "Print network connections and routing tables",
    "ss": "Investigate sockets",
    "traceroute": "Trace the route packets take to a host",
    "ssh": "Secure shell client",
    "scp": "Secure file copy over SSH",
    "nc": "Read and write network connections (netcat)",
    "dig": "DNS lookup utility",
    "nslookup": "Query DNS name servers",
    "openssl": "TLS and cryptography toolkit",
    # System
    "ps": "Report running processes",
    "top": "Display running processes",
    "htop": "Interactive process viewer",
    "lsof": "List open files and the processes using them",
    "find": "Search for files in a directory hierarchy",
    "fd": "Fast file finder",
    "locate": "Find files by name using a prebuilt index",
    "which": "Locate a command on PATH",
    "whereis": "Locate binary, source and manual files for a command",
    "sudo": "Run a command as another user",
    "chmod": "Change file permissions",
    "chown": "Change file owner and group",
    "kill": "Send a signal to a process",
    "df": "Report file system disk space usage",
    "du": "Estimate file space usage",
    "free": "Display memory usage",
    # Archive
    "tar": "Archive files",
    "zip": "Package and compress files",
    "unzip": "Extract files from ZIP archives",
    "gzip": "Compress files",
    "gunzip": "Decompress gzip files",
    "rsync": "Fast incremental file transfer",
    # Container
    "docker": "Container platform",
    "docker-compose": "Define and run multi-container applications",
    "podman": "Daemonless container engine",
    "kubectl": "Kubernetes CLI",
    "helm": "Kubernetes package manager",
    # Cloud
    "aws": "Amazon Web Services CLI",
    "gcloud": "Google Cloud CLI",
    "az": "Microsoft Azure CLI",
    "terraform": "Infrastructure as code provisioning",
    "ansible": "Configuration management and automation",
    # Documentation
    "man": "Display manual pages",
    "tldr": "Simplified community-driven man pages",
    "info": "Read Info documents",
}

# =========================================================================
# Examples
# =========================================================================

TOOL_EXAMPLES: dict[str, list[str]] = {
    "git": [
        "git status",
        "git log --oneline -10",
        "git diff --stat",
    ],
    "gh": ["gh pr list", "gh issue view 123"],
    "jq": [
        "jq '.' data.json",
        "jq '.items[] | .name' data.json",
        "curl -s https://api.example.com | jq '.data'",
    ],
    "curl": [
        "curl -I https://example.com",
        "curl -s -X POST -H 'Content-Type: application/json' -d '{}' URL",
        "curl -L -o file.tar.gz URL",
    ],
    "wget": ["wget URL", "wget -c URL"],
    "grep": ["grep -rn 'pattern' .", "grep -i 'error' app.log"],
    "rg": ["rg 'pattern'", "rg -t py 'def main'"],
    "sed": ["sed -n '10,20p' file", "sed -i 's/old/new/g' file"],
    "awk": ["awk '{print $1}' file", "awk -F, '{sum += $3} END {print sum}' data.csv"],
    "find": ["find . -name '*.log' -mtime +7", "find . -type f -size +100M"],
    "lsof": ["lsof -i :8080", "lsof -p PID"],
    "ss": ["ss -tulpn"],
    "netstat": ["netstat -tulpn"],
    "ping": ["ping -c 4 example.com"],
    "traceroute": ["traceroute example.com"],
    "dig": ["dig example.com", "dig +short example.com MX"],
    "ps": ["ps aux", "ps aux | grep node"],
    "df": ["df -h"],
    "du": ["du -sh *", "du -h --max-depth=1"],
    "chmod": ["chmod +x script.sh", "chmod 644 file"],
    "sudo": ["sudo COMMAND", "sudo -u USER COMMAND"],
    "tar": ["tar -czf archive.tar.gz dir/", "tar -xzf archive.tar.gz"],
    "rsync": ["rsync -avz src/ host:dest/"],
    "docker": [
        "docker ps",
        "docker logs -f CONTAINER",
        "docker exec -it CONTAINER sh",
    ],
    "kubectl": [
        "kubectl get pods",
        "kubectl describe pod POD",
        "kubectl logs POD",
    ],
    "ssh": ["ssh user@host", "ssh -i key.pem user@host"],
}

# =========================================================================
# Match rules
# =========================================================================

ERROR_PATTERNS: dict[str, list[str]] = {
    "permission denied": ["sudo", "chmod", "lsof"],
    "operation not permitted": ["sudo", "chown", "chmod"],
    "command not found": ["which", "whereis", "locate"],
    "no such file or directory": ["find", "locate", "fd"],
    "address already in use": ["lsof", "ss", "netstat", "kill"],
    "connection refused": ["curl", "nc", "ss", "netstat"],
    "connection timed out": ["ping", "traceroute", "curl"],
    "could not resolve host": ["dig", "nslookup", "ping"],
    "name or service not known": ["dig", "nslookup"],
    "certificate": ["openssl", "curl"],
    "no space left on device": ["df", "du", "find"],
    "out of memory": ["free", "top", "htop", "ps"],
    "too many open files": ["lsof", "ps"],
    "segmentation fault": ["gdb", "strace"],
    "not a git repository": ["git"],
    "merge conflict": ["git"],
    "cannot find module": ["npm", "yarn", "pnpm", "node"],
    "modulenotfounderror": ["pip", "python3"],
    "parse error": ["jq", "yq"],
    "cannot connect to the docker daemon": ["docker", "podman"],
    "pull access denied": ["docker", "podman"],
    "crashloopbackoff": ["kubectl", "helm"],
    "unable to locate credentials": ["aws"],
}

TASK_PATTERNS: dict[str, list[str]] = {
    "debug network": ["ping", "netstat", "traceroute", "ss", "curl", "dig"],
    "check open ports": ["ss", "netstat", "lsof", "nc"],
    "dns lookup": ["dig", "nslookup"],
    "download file": ["curl", "wget"],
    "test api": ["curl", "jq"],
    "process json": ["jq"],
    "parse json": ["jq"],
    "process yaml": ["yq"],
    "search text": ["rg", "grep", "awk"],
    "transform text": ["sed", "awk"],
    "find files": ["find", "fd", "locate"],
    "monitor processes": ["top", "htop", "ps"],
    "kill process": ["ps", "kill", "lsof"],
    "check disk usage": ["df", "du"],
    "check memory": ["free", "top"],
    "compress files": ["tar", "gzip", "zip"],
    "extract archive": ["tar", "unzip", "gunzip"],
    "sync files": ["rsync", "scp"],
    "remote access": ["ssh", "scp"],
    "version control": ["git", "gh"],
    "review pull request": ["gh", "git"],
    "install packages": ["npm", "pip", "yarn", "pnpm"],
    "manage containers": ["docker", "docker-compose", "podman"],
    "deploy to kubernetes": ["kubectl", "helm"],
    "provision infrastructure": ["terraform", "ansible"],
    "manage cloud resources": ["aws", "gcloud", "az"],
    "trace system calls": ["strace", "lsof"],
    "read documentation": ["man", "tldr", "info"],
}


def _build_rules(patterns: dict[str, list[str]]) -> tuple[MatchRule, ...]:
    return tuple(
        MatchRule(pattern=pattern, recommended=tuple(tools))
        for pattern, tools in patterns.items()
    )


ERROR_RULES: tuple[MatchRule, ...] = _build_rules(ERROR_PATTERNS)
TASK_RULES: tuple[MatchRule, ...] = _build_rules(TASK_PATTERNS)

# =========================================================================
# Project markers
# =========================================================================

# Marker file -> (project type, tools worth having for it). First match wins.
PROJECT_MARKERS: list[tuple[tuple[str, ...], str, list[str]]] = [
    (("package.json",), "node.js", ["npm", "yarn", "pnpm", "node"]),
    (("go.mod",), "go", ["go", "gofmt"]),
    (("Cargo.toml",), "rust", ["cargo", "rustc"]),
    (("requirements.txt", "pyproject.toml"), "python", ["python", "pip", "python3"]),
    (("Dockerfile",), "docker", ["docker", "docker-compose"]),
]


def describe(name: str) -> str:
    """Return the curated description for a tool, or a generated placeholder."""
    return TOOL_DESCRIPTIONS.get(name, f"{name} command line tool")


def categorize(name: str) -> str:
    """Return the category of a tool, ``"other"`` when it is not curated."""
    return _CATEGORY_BY_TOOL.get(name, "other")


def examples_for(name: str) -> list[str]:
    """Return curated usage examples for a tool (possibly empty)."""
    return list(TOOL_EXAMPLES.get(name, []))


def resolve_category(value: str) -> str:
    """Resolve a category name or unique prefix to its canonical name.

    ``"dev"`` resolves to ``"development"``. Ambiguous or unknown values
    are returned lowercased so that they simply match nothing.
    """
    normalized = value.strip().lower()
    if normalized in CATEGORIES:
        return normalized
    candidates = [c for c in CATEGORIES if c.startswith(normalized)]
    if normalized and len(candidates) == 1:
        return candidates[0]
    return normalized
