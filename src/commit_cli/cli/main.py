"""CLI entry point for commit-cli."""
import argparse
from dotenv import load_dotenv
import json
import logging
import shutil
import sys
import textwrap
import traceback
from typing import TYPE_CHECKING, Callable

from commit_cli.agents.exceptions import AgentError
from commit_cli.agents.model_port import is_authentication_error
from commit_cli.config import ConfigStore
from commit_cli.models import CommitStyle, DiffBundle, OrchestratorConfig, Preferences
from commit_cli.models.config_models import (
    DEFAULT_MAX_TOOL_CALLS,
    DEFAULT_MODEL,
    DEFAULT_TIMEOUT,
)
from commit_cli.orchestrator.exceptions import OrchestratorError
from commit_cli.utils.diff_compactor import collect_staged_bundle
from commit_cli.utils.git_repo import GitCommandError, GitRepository

if TYPE_CHECKING:
    from commit_cli.session import SessionController

load_dotenv()

# Exit codes
EXIT_SUCCESS = 0
EXIT_INVALID_INPUT = 1
EXIT_AGENT_ERROR = 2
EXIT_ORCHESTRATOR_ERROR = 3
EXIT_MODEL_ERROR = 4
EXIT_GIT_ERROR = 5
EXIT_KEYBOARD_INTERRUPT = 130

API_KEY_PREFIX = "sk-"
MAX_KEY_ATTEMPTS = 3
MIN_WRAP_WIDTH = 40
WRAP_MARGIN = 12

ControllerFactory = Callable[[str], "SessionController"]


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="commit-cli",
        description="Generate a commit message for the staged changes with an LLM agent",
    )
    parser.add_argument(
        "--repo",
        type=str,
        default=".",
        help="Path to the git working tree (default: current directory)",
    )
    parser.add_argument(
        "--provider",
        type=str,
        default="anthropic",
        choices=("anthropic", "openai"),
        help="LLM provider (default: anthropic)",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=DEFAULT_MODEL,
        help=f"Model ID to use (default: {DEFAULT_MODEL})",
    )
    parser.add_argument(
        "--max-tool-calls",
        type=int,
        default=DEFAULT_MAX_TOOL_CALLS,
        help=f"Hard cap on tool calls per generation (default: {DEFAULT_MAX_TOOL_CALLS})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Provider request timeout in seconds (default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument(
        "--conventional",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Use conventional commit prefixes (overrides stored preference)",
    )
    parser.add_argument(
        "--style",
        type=str,
        default=None,
        choices=[style.value for style in CommitStyle],
        help="Commit message style (overrides stored preference)",
    )
    parser.add_argument(
        "--guideline",
        type=str,
        default=None,
        help="Extra project-specific guideline for the message",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to the config file (default: ~/.commit-cli.json)",
    )
    parser.add_argument(
        "--yes", action="store_true", help="Accept the first generated message without asking"
    )
    parser.add_argument("--push", action="store_true", help="Push after committing")
    parser.add_argument(
        "--dry-run", action="store_true", help="Print the generated message and exit without committing"
    )
    parser.add_argument(
        "--output-json", action="store_true", help="Output the result as JSON"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose output")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not verbose:
        for noisy in ("httpx", "anthropic", "openai"):
            logging.getLogger(noisy).setLevel(logging.WARNING)


def ask_text(question: str) -> str | None:
    """Prompt on stdin; None when input is closed."""
    try:
        return input(question).strip()
    except EOFError:
        return None


def ask_yes_no(question: str, default: bool = False) -> bool:
    suffix = " [Y/n]: " if default else " [y/N]: "
    answer = ask_text(question + suffix)
    if answer is None:
        return False
    if not answer:
        return default
    return answer.lower() in {"y", "yes"}


def prompt_api_key(provider: str) -> str | None:
    """Ask for an API key until one looks valid (starts with ``sk-``)."""
    for _ in range(MAX_KEY_ATTEMPTS):
        key = ask_text(f"Enter your {provider} API key ({API_KEY_PREFIX}...): ")
        if key is None:
            return None
        if not key:
            print("API key is required.", file=sys.stderr)
        elif not key.startswith(API_KEY_PREFIX):
            print(f"Invalid API key format (should start with {API_KEY_PREFIX}).", file=sys.stderr)
        else:
            return key
    return None


def resolve_api_key(store: ConfigStore, provider: str, interactive: bool) -> str | None:
    """Environment, then stored config, then an interactive prompt (stored on success)."""
    api_key = store.get_api_key(provider)
    if api_key or not interactive:
        return api_key
    api_key = prompt_api_key(provider)
    if api_key:
        store.store_api_key(api_key, provider)
    return api_key


def resolve_preferences(
    args: argparse.Namespace,
    store: ConfigStore,
    interactive: bool,
) -> Preferences:
    """Stored preferences (asked once on first run) with CLI flags on top."""
    preferences = store.get_preferences()
    if preferences is None:
        if interactive:
            print("Let's set up your commit message preferences (one-time setup).")
            preferences = Preferences(
                use_conventional_commits=ask_yes_no(
                    "Use conventional commit prefixes (feat:, fix:, chore:, etc.)?",
                    default=True,
                ),
                style=(
                    CommitStyle.DESCRIPTIVE
                    if ask_yes_no("Prefer descriptive commit messages?", default=False)
                    else CommitStyle.CONCISE
                ),
            )
            if store.store_preferences(preferences):
                print(f"Preferences saved. You can change them by editing {store.path}")
        else:
            preferences = Preferences()

    overrides: dict = {}
    if args.conventional is not None:
        overrides["use_conventional_commits"] = args.conventional
    if args.style is not None:
        overrides["style"] = CommitStyle(args.style)
    if args.guideline:
        overrides["custom_guideline"] = args.guideline
    if overrides:
        preferences = preferences.model_copy(update=overrides)
    return preferences


def wrap_message(message: str, width: int | None = None) -> str:
    """Wrap each line of ``message`` to the terminal width."""
    if width is None:
        width = max(MIN_WRAP_WIDTH, shutil.get_terminal_size().columns - WRAP_MARGIN)
    wrapped: list[str] = []
    for line in message.split("\n"):
        if len(line) <= width:
            wrapped.append(line)
        else:
            wrapped.extend(textwrap.wrap(line, width=width, break_long_words=True))
    return "\n".join(wrapped)


def print_message_human(message: str) -> None:
    print(f"\n{'='*60}")
    print("Proposed Commit Message")
    print(f"{'='*60}")
    print(wrap_message(message))
    print(f"{'='*60}\n")


def format_result_json(result: dict) -> str:
    """Serialize result dict to JSON string."""
    return json.dumps(result, indent=2, default=str)


def make_controller_factory(args: argparse.Namespace, repo: GitRepository) -> ControllerFactory:
    """Return a factory building a SessionController for a given API key.

    The tool registry is built once and shared by every controller the
    factory creates.
    """
    from commit_cli.orchestrator.runner import build_orchestrator
    from commit_cli.session import SessionController
    from commit_cli.tools import WorkspaceSandbox, build_default_registry

    observers = []
    if args.verbose:
        observers.append(
            lambda event: print(
                f"[tool] {event.tool_name} {event.arguments_summary}", file=sys.stderr
            )
        )
    registry = build_default_registry(WorkspaceSandbox(repo.root), repo, observers=observers)

    def factory(api_key: str) -> "SessionController":
        config = OrchestratorConfig(
            provider=args.provider,
            model=args.model,
            api_key=api_key,
            max_tool_calls=args.max_tool_calls,
            timeout=args.timeout,
        )
        return SessionController(build_orchestrator(config, registry))

    return factory


def run_generation_loop(
    factory: ControllerFactory,
    api_key: str,
    bundle: DiffBundle,
    preferences: Preferences,
    args: argparse.Namespace,
    store: ConfigStore,
    interactive: bool,
) -> str | None:
    """Generate until the user accepts a message; None when cancelled.

    Authentication failures offer to enter a new key and retry with a new
    session. Any other provider error propagates.
    """
    controller = factory(api_key)
    feedback: str | None = None

    while True:
        try:
            message = controller.generate(bundle, preferences, feedback)
        except Exception as exc:
            if not (interactive and is_authentication_error(exc)):
                raise
            print("Invalid API key detected.", file=sys.stderr)
            if not ask_yes_no("Would you like to enter a new API key?", default=True):
                return None
            new_key = prompt_api_key(args.provider)
            if not new_key:
                return None
            store.store_api_key(new_key, args.provider)
            controller = factory(new_key)
            print("API key updated. Retrying...")
            continue

        if args.yes or args.dry_run or not interactive:
            return message

        print_message_human(message)
        choice = ask_text("Use this message? [y]es / [r]egenerate / [c]ancel: ")
        if choice is None:
            return None
        choice = choice.lower()
        if choice in {"y", "yes", ""}:
            return message
        if choice in {"r", "regenerate"}:
            feedback = ask_text("Feedback for the next attempt (optional): ") or None
            continue
        return None


def _handle_error(label: str, exc: BaseException, verbose: bool, exit_code: int) -> int:
    """Print error message to stderr and return the exit code."""
    print(f"{label}: {exc}", file=sys.stderr)
    if verbose:
        traceback.print_exc(file=sys.stderr)
    return exit_code


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code integer.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.max_tool_calls < 0:
        print("Error: --max-tool-calls must be zero or more.", file=sys.stderr)
        return EXIT_INVALID_INPUT

    repo = GitRepository(args.repo)
    if not repo.is_git_repository():
        print(f"Error: '{args.repo}' is not a git repository.", file=sys.stderr)
        return EXIT_INVALID_INPUT

    store = ConfigStore(args.config)
    interactive = sys.stdin.isatty() and not args.yes

    try:
        api_key = resolve_api_key(store, args.provider, interactive)
        if not api_key:
            print(
                f"Error: no API key for {args.provider}. Set it in the environment "
                f"or in {store.path}.",
                file=sys.stderr,
            )
            return EXIT_AGENT_ERROR

        preferences = resolve_preferences(args, store, interactive)

        bundle = collect_staged_bundle(repo)
        if bundle.is_empty:
            print('No staged changes found. Stage your changes with "git add" first.')
            return EXIT_SUCCESS

        factory = make_controller_factory(args, repo)
        message = run_generation_loop(
            factory, api_key, bundle, preferences, args, store, interactive
        )

    except AgentError as exc:
        return _handle_error("Agent error", exc, args.verbose, EXIT_AGENT_ERROR)

    except OrchestratorError as exc:
        return _handle_error("Orchestrator error", exc, args.verbose, EXIT_ORCHESTRATOR_ERROR)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_KEYBOARD_INTERRUPT

    except Exception as exc:
        return _handle_error("Generation failed", exc, args.verbose, EXIT_MODEL_ERROR)

    if message is None:
        print("Operation cancelled.")
        return EXIT_SUCCESS

    result = {
        "message": message,
        "files_changed": len(bundle.files),
        "context_level": bundle.context_level.name.lower(),
        "committed": False,
        "pushed": False,
    }

    if args.dry_run:
        if args.output_json:
            print(format_result_json(result))
        else:
            print(message)
        return EXIT_SUCCESS

    try:
        repo.commit(message)
        result["committed"] = True
        if args.push or (interactive and ask_yes_no("Do you want to push changes now?")):
            repo.push()
            result["pushed"] = True
    except GitCommandError as exc:
        if args.output_json:
            result["error"] = str(exc)
            print(format_result_json(result))
        return _handle_error("Git error", exc, args.verbose, EXIT_GIT_ERROR)

    if args.output_json:
        print(format_result_json(result))
    elif result["pushed"]:
        print("Successfully committed and pushed!")
    else:
        print(f"Committed:\n{message}")
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
