"""System and user prompt construction for a generation session."""

from collections.abc import Sequence

from commit_cli.models import CommitStyle, DiffBundle, Preferences

CONVENTIONAL_DIRECTIVE = (
    "Use conventional commit format with prefixes like feat:, fix:, chore:, "
    "docs:, style:, refactor:, test:, perf:, ci:, build:, revert:."
)
PLAIN_DIRECTIVE = "Do NOT use conventional commit prefixes. Write natural commit messages."
DESCRIPTIVE_DIRECTIVE = (
    'Be descriptive and detailed. Explain the "why" behind changes when relevant. '
    "Multi-line messages are encouraged."
)
CONCISE_DIRECTIVE = "Be concise and to the point. Keep it short, ideally one line."

TOOL_HINTS = {
    "git_commit_history": "Check the last few commit subjects (only if the project's convention is unclear)",
    "git_staged_files": "See staged files (already in the diff, do not call this)",
    "git_unstaged_files": "See modified files that are not staged (rarely relevant)",
    "git_untracked_files": "See untracked files (rarely relevant)",
    "git_file_diff": "Show one staged file's diff with context (only if the diff above is ambiguous)",
    "read_file": "Read a file (only if critical context is missing, very rare)",
    "list_dir": "List a directory (almost never needed)",
}


def _tool_lines(tool_names: Sequence[str]) -> str:
    return "\n".join(f"- {name}: {TOOL_HINTS.get(name, 'Auxiliary context')}" for name in tool_names)


def build_system_prompt(preferences: Preferences, tool_names: Sequence[str]) -> str:
    conventional = (
        CONVENTIONAL_DIRECTIVE if preferences.use_conventional_commits else PLAIN_DIRECTIVE
    )
    style = (
        DESCRIPTIVE_DIRECTIVE
        if preferences.style == CommitStyle.DESCRIPTIVE
        else CONCISE_DIRECTIVE
    )

    rules = [
        conventional,
        style,
        "Focus on WHAT changed (clear from the diff) and WHY if obvious from context.",
        "OUTPUT FORMAT: your response must be ONLY the commit message. No explanations.",
        "Do NOT use markdown code blocks or formatting.",
        "If multi-line, use proper git commit format (subject line, blank line, body).",
    ]
    guideline = (preferences.custom_guideline or "").strip()
    if guideline:
        rules.append(f"Project guideline: {guideline}")
    numbered_rules = "\n".join(f"{idx}. {rule}" for idx, rule in enumerate(rules, start=1))

    return (
        "You are an expert developer. Your task is to generate a commit message "
        "for the provided git diff.\n\n"
        "The diff is already optimized for token efficiency: it lists the changed "
        "files, the change stats and the hunks with minimal context.\n\n"
        f"Available tools (use EXTREMELY RARELY):\n{_tool_lines(tool_names)}\n\n"
        "Tool usage rules:\n"
        "1. The diff contains everything you need in almost every case.\n"
        "2. Do not call any tool unless it is critical for understanding the change.\n"
        "3. Never read files just to understand better; read at most 2 files.\n"
        "4. Never check commit history unless the changes are completely ambiguous.\n"
        "5. Aim for ZERO tool calls. Tool calls per session are capped.\n\n"
        f"Commit message rules:\n{numbered_rules}\n\n"
        "CRITICAL: your ENTIRE response must be the commit message itself, nothing else."
    )


def build_user_prompt(diff: DiffBundle, feedback: str | None = None) -> str:
    prompt = f"Generate a commit message for this diff:\n\n{diff.diff_text}"
    feedback = (feedback or "").strip()
    if feedback:
        prompt += (
            f"\n\nUser feedback on previous attempt: {feedback}\n"
            "Please adjust the commit message based on this feedback."
        )
    return prompt
