"""Command line interface for multi_uploader package."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from rich.logging import RichHandler

from .cli_progress import (
    BatchProgressDisplay,
    render_configuration_summary,
    render_markdown,
    render_results,
)
from .models import PLUGIN_NAME, MultiUploadConfig
from .orchestrator import LocalUploadHost, MultiUploadPlugin, PrimaryUploadError
from .services.capabilities import CapabilityTable
from .services.config import DictConfigProvider, get_primary_destination
from .services.registry import DestinationRegistry, capability_overrides


DEFAULT_CONFIG_FILE = "multi-up.json"


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Route library logs through a RichHandler on the root logger.

    The console already shows the batch timeline, so logs stay off unless
    --debug, --log-level or LOG_LEVEL asks for them. Returns "silent" or the
    effective level name.
    """
    root = logging.getLogger()
    root.handlers.clear()
    logging.disable(logging.NOTSET)

    requested = "DEBUG" if debug else (log_level or os.getenv("LOG_LEVEL"))
    if silent or not requested:
        logging.disable(logging.CRITICAL)
        root.setLevel(logging.CRITICAL + 1)
        return "silent"

    level = getattr(logging, requested.upper(), logging.INFO)
    handler = RichHandler(markup=False, rich_tracebacks=True, show_path=False, show_time=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(level)
    return logging.getLevelName(level)


def _parse_env_line(raw_line: str) -> Optional[Tuple[str, str]]:
    """Parse ``[export ]KEY=value`` into a pair; comments and junk yield None."""
    line = raw_line.strip()
    if line.startswith("export "):
        line = line[7:].lstrip()
    if not line or line.startswith("#") or "=" not in line:
        return None

    key, _, value = line.partition("=")
    key, value = key.strip(), value.strip()
    if len(value) >= 2 and value[0] in "'\"" and value[-1] == value[0]:
        value = value[1:-1]
    return (key, value) if key else None


def _load_env_file(path: Path, override: bool = False) -> None:
    """Export variables from a dotenv file; shell values win unless ``override``."""
    if not path.is_file():
        raise CLIError(f"env file not found: {path}")
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    pairs = filter(None, map(_parse_env_line, lines))
    for key, value in pairs:
        if override or key not in os.environ:
            os.environ[key] = value


def _default_env_file() -> Optional[Path]:
    candidate = Path(".env")
    return candidate if candidate.is_file() else None


def _expand_env(value: Any) -> Any:
    """Expand ``$VAR``/``${VAR}`` references in every string of the config."""
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, dict):
        return {key: _expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    return value


def _load_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise CLIError(f"config file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise CLIError(f"could not read config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise CLIError(f"config file must hold a JSON object: {path}")
    return _expand_env(data)


def _apply_overrides(data: Dict[str, Any], args: argparse.Namespace) -> DictConfigProvider:
    """Layer command line flags over the JSON config."""
    config = DictConfigProvider(data)
    if args.primary:
        config.set_config("bed.uploader", args.primary)
    if args.beds is not None:
        config.set_config(f"{PLUGIN_NAME}.enabledBeds", args.beds)
    if args.no_unify:
        config.set_config(f"{PLUGIN_NAME}.unifyFileName", False)
    if args.retry_count is not None:
        config.set_config(f"{PLUGIN_NAME}.retryCount", args.retry_count)
    if args.retry_delay is not None:
        config.set_config(f"{PLUGIN_NAME}.retryDelay", args.retry_delay)
    if args.no_markdown:
        config.set_config(f"{PLUGIN_NAME}.generateMarkdown", False)
    return config


def _build_registry(destinations: Any) -> tuple[DestinationRegistry, CapabilityTable]:
    if not isinstance(destinations, dict) or not destinations:
        raise CLIError("config has no 'destinations' block")
    try:
        registry = DestinationRegistry.from_config(destinations)
    except ValueError as exc:
        raise CLIError(f"invalid destination config: {exc}") from exc
    return registry, CapabilityTable(capability_overrides(destinations))


async def _run_upload(
    image: Path,
    config: DictConfigProvider,
    registry: DestinationRegistry,
    capabilities: CapabilityTable,
) -> int:
    host = LocalUploadHost(registry, config)
    plugin = MultiUploadPlugin(registry, capabilities=capabilities)
    display = BatchProgressDisplay()
    display.attach(plugin.events)
    plugin.register(host)

    item = {
        "file_name": image.name,
        "extension": image.suffix or ".png",
        "buffer": image.read_bytes(),
    }
    try:
        batch = await host.upload([item])
    except PrimaryUploadError as exc:
        raise CLIError(str(exc)) from exc

    outcome = batch.state.get("outcome")
    if outcome is None:
        return 1
    render_results(outcome.records, outcome.warnings)
    render_markdown(outcome.markdown)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multi-up",
        description="Upload an image to a primary bed and mirror it to every backup bed.",
    )
    parser.add_argument("image", nargs="?", type=Path, help="Image file to upload")
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help=f"JSON config (default from MULTI_UP_CONFIG or ./{DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument("-p", "--primary", default=None, help="Primary bed id (overrides bed.uploader)")
    parser.add_argument("-b", "--beds", default=None, help="Enabled beds, comma-separated")
    parser.add_argument("--no-unify", action="store_true", help="Do not unify filenames")
    parser.add_argument("--retry-count", type=int, default=None, help="Retries per bed")
    parser.add_argument("--retry-delay", type=int, default=None, help="Delay between retries (ms)")
    parser.add_argument("--no-markdown", action="store_true", help="Skip the Markdown summary")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="multi-up (from multi_uploader)",
    )
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file or _default_env_file()
    if used_env_file is not None:
        try:
            _load_env_file(Path(used_env_file))
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    if args.image is None:
        parser.print_help()
        return 0

    image = Path(args.image).expanduser()
    if not image.is_file():
        print(f"ERROR: image does not exist: {image}", file=sys.stderr)
        return 1

    config_path = args.config or Path(os.getenv("MULTI_UP_CONFIG") or DEFAULT_CONFIG_FILE)
    try:
        data = _load_config_file(Path(config_path).expanduser())
        config = _apply_overrides(data, args)
        registry, capabilities = _build_registry(data.get("destinations"))
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    options = MultiUploadConfig.from_mapping(config.get_config(PLUGIN_NAME))
    render_configuration_summary(
        {
            "Image": str(image),
            "Config": str(config_path),
            "Primary": get_primary_destination(config) or "(missing)",
            "Beds": ", ".join(options.bed_list) or "(none)",
            "Registered": ", ".join(registry.ids()),
            "Unify Filename": "yes" if options.unify_filename else "no",
            "Retries": f"{options.retry_count} x {options.retry_delay} ms",
            "Env File": str(used_env_file) if used_env_file else "-",
            "Logging": effective_log_mode,
        }
    )

    try:
        return asyncio.run(_run_upload(image, config, registry, capabilities))
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
